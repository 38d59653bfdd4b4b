import pytest

from data_cleaner import DEFAULT_COLUMN_SCHEMA

ROW_WIDTH = 22


def build_row(width=ROW_WIDTH, **fields):
    """Row of `width` cells with the given fields at their first schema index."""
    row = [''] * width
    for field, value in fields.items():
        row[DEFAULT_COLUMN_SCHEMA[field][0]] = value
    return row


def to_csv_line(row):
    return ','.join(f'"{cell}"' if ',' in cell else cell for cell in row)


@pytest.fixture
def survey_csv():
    header = [f'col{i}' for i in range(ROW_WIDTH)]
    rows = [
        build_row(timestamp='2023-10-01', role='Aluno (a)', safety='Sempre', violence='Não',
                  respect_students='Frequentemente', mental_health='Às vezes',
                  facilities='Raramente', suggestion='A escola é muito boa, parabéns'),
        build_row(timestamp='2023-10-02', role='Professor (a)', safety='Raramente', violence='Sim',
                  respect_students='Às vezes', mental_health='Nunca',
                  facilities='Nunca', suggestion='Falta segurança na portaria, deixa a desejar'),
        build_row(timestamp='2023-10-03', role='', safety='Frequentemente', violence='Não Sei',
                  respect_students='Sempre', mental_health='Frequentemente',
                  facilities='Às vezes', suggestion='ok'),
        ['2023-10-04', 'x', 'Aluno (a)'],
    ]
    return '\n'.join(to_csv_line(r) for r in [header] + rows) + '\n'
