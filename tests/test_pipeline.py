import pytest

from data_cleaner import SurveyRecord
from pipeline import (OTHER_ROLE, AggregateView, EmptySurveyError, aggregate, create_summary_json,
                      run_pipeline, round_half_up, sentiment_distribution, suggestions_to_dataframe)


def record(role='Aluno (a)', safety='Sempre', suggestion='', **fields):
    return SurveyRecord(role=role, safety=safety, suggestion=suggestion, **fields)


def test_dimension_averages():
    records = [
        record(safety='Sempre', facilities='Nunca', respect_students='Às vezes', mental_health='Sempre'),
        record(safety='Raramente', facilities='Talvez', respect_students='Frequentemente', mental_health='Nunca'),
    ]

    view = aggregate(records)

    assert view.total == 2
    assert view.dimension_averages['safety'] == pytest.approx(3.5)
    assert view.dimension_averages['facilities'] == pytest.approx(0.5)
    assert view.dimension_averages['respect'] == pytest.approx(3.5)
    assert view.dimension_averages['mental_health'] == pytest.approx(3.0)
    assert view.dimension_averages['support'] == pytest.approx(2.4)


def test_violence_percentage():
    records = [record(violence='Sim'), record(violence='Não'), record(violence='Não Sei'), record(violence='Sim')]

    assert aggregate(records).violence_percentage == pytest.approx(50.0)


def test_empty_records_fail_fast():
    with pytest.raises(EmptySurveyError):
        aggregate([])


def test_empty_survey_error_is_value_error():
    assert issubclass(EmptySurveyError, ValueError)


def test_safety_by_role_sorted_descending_with_other_bucket():
    records = [
        record(role='Professor (a)', safety='Raramente'),
        record(role='Aluno (a)', safety='Sempre'),
        record(role='', safety='Às vezes'),
        record(role='   ', safety='Frequentemente'),
        record(role='Aluno (a)', safety='Frequentemente'),
    ]

    groups = aggregate(records).safety_by_role

    assert [g.role for g in groups] == ['Aluno (a)', OTHER_ROLE, 'Professor (a)']
    assert groups[0].average_safety == pytest.approx(4.5)
    assert groups[0].respondents == 2
    assert groups[1].average_safety == pytest.approx(3.5)
    assert groups[1].respondents == 2


def test_safety_by_role_ties_keep_first_seen_order():
    records = [record(role='B'), record(role='A'), record(role='C', safety='Nunca')]

    assert [g.role for g in aggregate(records).safety_by_role] == ['B', 'A', 'C']


def test_short_suggestions_are_skipped():
    records = [
        record(suggestion='ok'),
        record(suggestion='  bom  '),
        record(suggestion='Muito bom'),
        record(suggestion=''),
        record(suggestion='Falta limpeza'),
    ]

    suggestions = aggregate(records).suggestions

    assert [s.text for s in suggestions] == ['Muito bom', 'Falta limpeza']
    assert [s.id for s in suggestions] == [0, 1]
    assert [s.sentiment for s in suggestions] == ['Positive', 'Negative']


def test_sentiment_distribution_rounds_each_share():
    records = [
        record(suggestion='Muito bom'),
        record(suggestion='Falta limpeza'),
        record(suggestion='a escola é ok'),
    ]

    sentiment = aggregate(records).sentiment

    assert (sentiment.positive, sentiment.neutral, sentiment.negative) == (33, 33, 33)
    assert sentiment.counts == {'Positive': 1, 'Neutral': 1, 'Negative': 1}


def test_sentiment_distribution_rounds_half_up():
    records = [record(suggestion='Muito bom')] + [record(suggestion='a escola é ok')] * 7

    sentiment = aggregate(records).sentiment

    assert sentiment.positive == 13
    assert sentiment.neutral == 88


def test_sentiment_distribution_without_suggestions():
    sentiment = sentiment_distribution([])

    assert (sentiment.positive, sentiment.neutral, sentiment.negative) == (0, 0, 0)


def test_round_half_up():
    assert round_half_up(12.5) == 13
    assert round_half_up(0.49) == 0


def test_advanced_stats_metrics():
    records = [record(safety='Sempre'), record(safety='Nunca')]

    stats = {s.metric: s for s in aggregate(records).advanced_stats}

    assert set(stats) == {'safety', 'facilities', 'mental_health', 'respect'}
    assert stats['safety'].mean == pytest.approx(3.0)
    assert stats['safety'].std_dev == pytest.approx(2.0)
    assert stats['safety'].mode == 5
    assert stats['safety'].interpretation == 'Polarization'
    assert stats['facilities'].interpretation == 'Consensus'


def test_aggregate_is_idempotent():
    records = [
        record(role='Aluno (a)', suggestion='Muito bom, parabéns'),
        record(role='', safety='Nunca', suggestion='Tem bullying e medo'),
    ]

    assert aggregate(records) == aggregate(records)


def test_run_pipeline_end_to_end(survey_csv):
    view = run_pipeline(survey_csv)

    assert isinstance(view, AggregateView)
    assert view.total == 3
    assert view.dimension_averages['safety'] == pytest.approx((5 + 2 + 4) / 3)
    assert view.violence_percentage == pytest.approx(100 / 3)
    assert [g.role for g in view.safety_by_role] == ['Aluno (a)', OTHER_ROLE, 'Professor (a)']
    assert [s.sentiment for s in view.suggestions] == ['Positive', 'Negative']
    assert view.sentiment.positive == 50


def test_run_pipeline_header_only():
    with pytest.raises(EmptySurveyError):
        run_pipeline('a,b,c,d,e\n')


def test_suggestions_to_dataframe_filters(survey_csv):
    view = run_pipeline(survey_csv)

    assert list(suggestions_to_dataframe(view).columns) == ['ID', 'Role', 'Sentiment', 'Date', 'Feedback']
    assert len(suggestions_to_dataframe(view)) == 2

    negative = suggestions_to_dataframe(view, sentiment='Negative')
    assert negative['Role'].tolist() == ['Professor (a)']

    assert suggestions_to_dataframe(view, role='Aluno (a)', sentiment='Negative').empty


def test_create_summary_json(survey_csv):
    view = run_pipeline(survey_csv)

    summary = create_summary_json(view, sample_size=1)

    assert summary['total_respondents'] == 3
    assert summary['dimension_averages']['safety'] == 3.7
    assert summary['total_comments'] == 2
    assert summary['comment_sample'] == ['A escola é muito boa, parabéns']
    assert summary['dispersion']['safety'] in ('Consensus', 'Moderate variation', 'Polarization')
