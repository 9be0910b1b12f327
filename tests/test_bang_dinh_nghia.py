import pytest

from mtef2latex.ban_ghi import ColorDef, EncodingDef, FontDef, FontStyleDef
from mtef2latex.bang_dinh_nghia import DefinitionTables
from mtef2latex.config import RecordOptions
from mtef2latex.loi import UnresolvedIndexError


def test_builtin_encodings_come_first():
    tables = DefinitionTables()
    assert tables.encodings == ('MTCode', 'Unknown', 'Symbol', 'MTExtra')
    assert tables.add(EncodingDef('Symbol2')) == 4
    assert tables.encoding(4) == 'Symbol2'


def test_each_table_is_indexed_by_insertion_order():
    tables = DefinitionTables()
    assert tables.add(FontDef(2, 'Symbol')) == 0
    assert tables.add(FontDef(0, 'Times New Roman')) == 1
    assert tables.add(FontStyleDef(1, 0)) == 0
    assert tables.add(ColorDef(RecordOptions(0), (0, 0, 0))) == 0
    assert tables.font(1).name == 'Times New Roman'
    assert tables.font_encoding(0) == 'Symbol'


@pytest.mark.parametrize('lookup, table', [
    ('encoding', 'encoding'),
    ('font', 'font'),
    ('font_style', 'font_style'),
    ('color', 'color'),
])
def test_out_of_range_index(lookup, table):
    tables = DefinitionTables()
    with pytest.raises(UnresolvedIndexError) as exc_info:
        getattr(tables, lookup)(7)
    assert exc_info.value.table == table
    assert exc_info.value.index == 7


def test_negative_index_is_unresolved():
    with pytest.raises(UnresolvedIndexError):
        DefinitionTables().encoding(-1)


def test_add_rejects_non_definitions():
    with pytest.raises(TypeError):
        DefinitionTables().add('Symbol')


def test_trace_called_per_append():
    calls = []
    tables = DefinitionTables(trace=lambda event, **fields: calls.append((event, fields)))
    tables.add(FontDef(2, 'Symbol'))
    assert calls == [('table', {'table': 'font', 'index': 0, 'entry': FontDef(2, 'Symbol')})]


def test_freeze_stops_appends_but_keeps_lookups():
    tables = DefinitionTables()
    tables.add(EncodingDef('Greek'))
    tables.freeze()
    with pytest.raises(RuntimeError):
        tables.add(EncodingDef('Late'))
    assert tables.encoding(4) == 'Greek'
