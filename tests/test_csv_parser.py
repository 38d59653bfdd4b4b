import pytest

from csv_parser import decode_csv_bytes, load_raw_text, parse_csv


def test_plain_rows_round_trip():
    rows = [['a', 'b', 'c'], ['1', '2', '3'], ['x', 'y', 'z']]
    text = '\n'.join(','.join(r) for r in rows)

    assert parse_csv(text) == rows


def test_embedded_delimiters_newline_and_escaped_quote():
    text = '"He said ""hi"", then\ncommas,here"'

    assert parse_csv(text) == [['He said "hi", then\ncommas,here']]


def test_quoted_newline_joins_physical_lines():
    text = 'id,comment\n1,"first line\nsecond line"\n2,plain\n'

    rows = parse_csv(text)

    assert len(rows) == text.count('\n') - 1
    assert rows[1] == ['1', 'first line\nsecond line']


def test_three_lines_give_three_rows():
    assert len(parse_csv('a,b\nc,d\ne,f')) == 3


def test_crlf_is_one_terminator():
    assert parse_csv('a,b\r\nc,d\r\n') == [['a', 'b'], ['c', 'd']]


def test_lone_carriage_return_ends_row():
    assert parse_csv('a\rb') == [['a'], ['b']]


def test_blank_lines_do_not_create_rows():
    assert parse_csv('a,b\n\n\nc,d\n\n') == [['a', 'b'], ['c', 'd']]


def test_cells_are_trimmed():
    assert parse_csv('  a ,  " b "  ,c  ') == [['a', 'b', 'c']]


def test_empty_cells_are_kept():
    assert parse_csv('a,,c,\n') == [['a', '', 'c', '']]


def test_empty_input():
    assert parse_csv('') == []


def test_backslash_is_literal():
    assert parse_csv('a\\,b') == [['a\\', 'b']]


def test_decode_strips_utf8_bom():
    assert decode_csv_bytes('\ufeffNão,Sim'.encode('utf-8')) == 'Não,Sim'


def test_decode_falls_back_for_legacy_exports():
    assert decode_csv_bytes('Não Sei'.encode('cp1252')) == 'Não Sei'


def test_load_raw_text_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_raw_text(str(tmp_path / 'missing.csv'))


def test_load_raw_text_reads_file(tmp_path):
    path = tmp_path / 'survey.csv'
    path.write_bytes('Papel,Segurança\nAluno,Sempre\n'.encode('utf-8'))

    assert parse_csv(load_raw_text(str(path))) == [['Papel', 'Segurança'], ['Aluno', 'Sempre']]
