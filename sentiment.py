#!/usr/bin/env python3
"""
Lexicon-based sentiment classification for free-text survey suggestions.

Each comment is scored by summing word weights from a Portuguese polarity
lexicon. A weight is inverted when a negation precedes it ("não gosto", or
"não é bom" through a linking verb) and amplified when a booster precedes it
("muito bom"). A handful of idiomatic phrases then shift the total before it
is compared against the decision thresholds.
"""

import re
from types import MappingProxyType
from typing import FrozenSet, List, Literal, Mapping, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

SentimentLabel = Literal['Positive', 'Neutral', 'Negative']

POSITIVE = 'Positive'
NEUTRAL = 'Neutral'
NEGATIVE = 'Negative'
LABELS = (POSITIVE, NEUTRAL, NEGATIVE)

TOKEN_SPLIT = re.compile(r'[\s,.;!?()"]+')

# Word -> polarity weight on a -3..+3 scale
DEFAULT_WEIGHTS = {
    # Positive
    'bom': 1, 'boa': 1, 'bons': 1, 'boas': 1,
    'ótimo': 2, 'ótima': 2, 'ótimos': 2, 'ótimas': 2,
    'excelente': 3, 'excelentes': 3,
    'maravilhoso': 3, 'maravilhosa': 3,
    'parabéns': 2,
    'gosto': 1, 'amo': 3, 'adora': 2,
    'seguro': 2, 'segura': 2, 'segurança': 1,
    'feliz': 2, 'felicidade': 2,
    'melhorou': 2, 'melhor': 1,
    'agradável': 1,
    'apoio': 2, 'ajuda': 1, 'acolhimento': 2, 'acolhedor': 2,
    'respeito': 2, 'respeitoso': 2,
    'limpo': 1, 'limpeza': 1, 'organizado': 1,
    'eficiente': 2,
    'amigável': 1, 'amigo': 1,
    'funciona': 1,
    'legal': 1,
    'satisfeito': 2, 'satisfeita': 2,
    'confio': 2, 'confiança': 2,
    'top': 1, '10': 1,

    # Negative
    'ruim': -1, 'ruins': -1,
    'péssimo': -3, 'péssima': -3,
    'horrível': -3, 'horriveis': -3,
    'difícil': -1, 'dificuldade': -1,
    'triste': -2, 'tristeza': -2,
    'falta': -2, 'faltam': -2,
    'ausência': -1, 'ausente': -1,
    'precária': -2, 'precário': -2,
    'medo': -3,
    'violência': -3, 'violento': -3, 'violenta': -3,
    'inseguro': -3, 'insegura': -3, 'insegurança': -3,
    'risco': -2, 'arriscado': -2,
    'droga': -3, 'drogas': -3,
    'briga': -2, 'brigas': -2,
    'ameaça': -3, 'ameaçado': -3,
    'bullying': -3,
    'desrespeito': -3, 'desrespeitoso': -3,
    'sujo': -2, 'sujeira': -2,
    'quebrado': -2, 'quebrada': -2,
    'bagunça': -1, 'bagunçado': -1,
    'barulho': -1, 'barulhento': -1,
    'ignorante': -2, 'estúpido': -2,
    'lento': -1, 'demorado': -1,
    'vergonha': -2,
    'pior': -2, 'piorou': -2,
    'odeio': -3, 'detesto': -3,
    'insuportável': -3,
    'negligência': -3, 'negligente': -3,
    'abandonado': -3, 'abandono': -3,
    'ignorado': -2,
    'fome': -2,
    'bater': -2, 'apanhar': -2,
    'roubo': -3, 'furto': -3,
}

DEFAULT_NEGATIONS = ('não', 'nao', 'nem', 'nunca', 'jamais', 'sem', 'pouco', 'menos')

DEFAULT_BOOSTERS = ('muito', 'muita', 'bastante', 'extremamente', 'demais',
                    'super', 'realmente', 'totalmente', 'tão')

DEFAULT_LINKING_VERBS = ('é', 'e', 'foi', 'está', 'esta', 'tá', 'ta', 'são')

# Each group applies once if any of its phrases occurs in the text
DEFAULT_PHRASE_ADJUSTMENTS = (
    (('deixa a desejar', 'deixar a desejar'), -2),
    (('precisa melhorar',), -1),
    (('nada a reclamar', 'nada a declarar'), 1),
    (('valeu a pena',), 2),
)


class SentimentLexicon(BaseModel):
    """
    Immutable tables that drive the classifier.

    Build one per language or variant and hand it to SentimentClassifier.
    """
    model_config = ConfigDict(frozen=True)

    weights: Mapping[str, float]
    negations: FrozenSet[str] = frozenset(DEFAULT_NEGATIONS)
    boosters: FrozenSet[str] = frozenset(DEFAULT_BOOSTERS)
    linking_verbs: FrozenSet[str] = frozenset(DEFAULT_LINKING_VERBS)
    phrase_adjustments: Tuple[Tuple[Tuple[str, ...], float], ...] = DEFAULT_PHRASE_ADJUSTMENTS
    booster_factor: float = 1.5
    positive_threshold: float = 0.5
    negative_threshold: float = -0.5

    @field_validator('weights', mode='after')
    @classmethod
    def freeze_weights(cls, weights):
        return MappingProxyType(dict(weights))


DEFAULT_LEXICON = SentimentLexicon(weights=DEFAULT_WEIGHTS)


def tokenize(text: str) -> List[str]:
    """Lowercase text and split it into words, dropping punctuation."""
    return [token for token in TOKEN_SPLIT.split(text.lower()) if token]


class SentimentClassifier:
    def __init__(self, lexicon: SentimentLexicon = DEFAULT_LEXICON):
        self.lexicon = lexicon

    def score(self, text) -> float:
        """
        Signed sentiment score for a piece of text.

        Only the nearest modifier applies to each scored word: a negation
        right before it inverts the weight, otherwise a booster right before
        it multiplies the weight. A negation two words back also inverts the
        weight when the word in between is a linking verb.

        Args:
            text (str): Free-text comment

        Returns:
            float: 0.0 for empty or non-string input
        """
        if not text or not isinstance(text, str):
            return 0.0

        lexicon = self.lexicon
        lower = text.lower()
        tokens = tokenize(lower)
        score = 0.0

        for i, word in enumerate(tokens):
            weight = lexicon.weights.get(word, 0)
            if weight == 0:
                continue

            multiplier = 1.0
            if i > 0:
                prev = tokens[i - 1]
                if prev in lexicon.negations:
                    multiplier *= -1
                elif prev in lexicon.boosters:
                    multiplier *= lexicon.booster_factor

                if i > 1 and prev in lexicon.linking_verbs and tokens[i - 2] in lexicon.negations:
                    multiplier *= -1

            score += weight * multiplier

        for phrases, amount in lexicon.phrase_adjustments:
            if any(phrase in lower for phrase in phrases):
                score += amount

        return score

    def classify(self, text) -> SentimentLabel:
        """Label a comment Positive, Neutral or Negative."""
        if not text or not isinstance(text, str):
            return NEUTRAL

        score = self.score(text)
        if score > self.lexicon.positive_threshold:
            return POSITIVE
        if score < self.lexicon.negative_threshold:
            return NEGATIVE
        return NEUTRAL


_default_classifier = SentimentClassifier()


def classify_sentiment(text) -> SentimentLabel:
    """Classify text with the default Portuguese lexicon."""
    return _default_classifier.classify(text)
