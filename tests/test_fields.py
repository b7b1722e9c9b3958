from enum import IntEnum

import pytest

from netstruct.meta import Compliant, Endianess
from netstruct.exceptions import StructuralError, EnumError
from netstruct.fields import (
    StructField,
    Int24Field,
    BitField,
    StringField,
    CStringField,
    IntStringField,
    ArrayField,
)


class Kind(IntEnum):
    NONE = 0
    FIRST = 1
    SECOND = 2


def test_structfield_conversion_raw_value():
    """Check that the attributes "value" and "raw" are the analogous
    of the integers and bytes representation for a field."""
    field = StructField('I')

    assert field.size == 4
    assert field.raw == b'\x00\x00\x00\x00'
    assert field.value == 0

    field.value = 0xcafe

    assert field.value == 0xcafe
    assert field.raw == b'\x00\x00\xca\xfe'


def test_structfield_endianess():
    big = StructField('H', default=0x7fff, endianess=Endianess.BIG_ENDIAN)
    little = StructField('H', default=0x7fff, endianess=Endianess.LITTLE_ENDIAN)

    assert big.raw == b'\x7f\xff'
    assert little.raw == b'\xff\x7f'

    assert StructField('H').read(b'\x7f\xff') == 0x7fff
    assert StructField('H', endianess=Endianess.LITTLE_ENDIAN).read(b'\xff\x7f') == 0x7fff


def test_structfield_read():
    field = StructField('I')

    assert field.read(0xcafe) == 0xcafe
    assert field.raw == b'\x00\x00\xca\xfe'

    with pytest.raises(StructuralError):
        field.read(b'\x01\x02')


def test_structfield_overflow():
    field = StructField('B')

    with pytest.raises(StructuralError):
        field.value = 0x100

    assert field.value == 0


def test_structfield_enum():
    field = StructField('B', enum=Kind)

    field.value = 'SECOND'

    assert field.value == 2
    assert field.to_human() == 'SECOND'
    assert field.raw == b'\x02'

    field.value = Kind.FIRST
    assert field.value == 1

    field.from_human('NONE')
    assert field.value == 0

    with pytest.raises(EnumError):
        field.value = 'THIRD'

    # unknown values from the wire are kept
    assert field.read(b'\x07') == 7
    assert field.to_human() == 7


def test_structfield_enum_compliant():
    field = StructField('B', enum=Kind, compliant=Compliant.ENUM)

    assert field.read(b'\x01') == 1

    with pytest.raises(StructuralError):
        field.read(b'\x07')


def test_structfield_magic():
    field = StructField('I', default=0xcafebabe, is_magic=True, compliant=Compliant.MAGIC)

    assert field.read(b'\xca\xfe\xba\xbe') == 0xcafebabe

    with pytest.raises(StructuralError):
        field.read(b'\x00\x00\x00\x00')


def test_int24field():
    field = Int24Field(default=0x123456)

    assert field.size == 3
    assert field.raw == b'\x12\x34\x56'
    assert Int24Field().read(b'\x12\x34\x56') == 0x123456

    little = Int24Field(default=0x123456, endianess=Endianess.LITTLE_ENDIAN)

    assert little.raw == b'\x56\x34\x12'
    assert Int24Field(endianess=Endianess.LITTLE_ENDIAN).read(b'\x56\x34\x12') == 0x123456

    with pytest.raises(StructuralError):
        field.value = 0x1000000


def test_bitfield():
    field = BitField('B', [('version', 4), ('ihl', 4)], default=0x45)

    assert field.bit_names == ['version', 'ihl']
    assert field['version'] == 4
    assert field['ihl'] == 5

    field['ihl'] = 6

    assert field.value == 0x46
    assert field.raw == b'\x46'
    assert field.to_dict() == {'version': 4, 'ihl': 6}

    with pytest.raises(StructuralError):
        field['ihl'] = 16

    with pytest.raises(KeyError):
        field['_']


def test_bitfield_reserved():
    field = BitField('H', [('flag', 1), ('_', 3), ('offset', 12)])

    field['flag'] = 1
    field['offset'] = 0xabc

    assert field.raw == b'\x8a\xbc'
    assert field.bit_names == ['flag', 'offset']


def test_bitfield_wrong_widths():
    with pytest.raises(ValueError):
        BitField('B', [('a', 3), ('b', 3)])


def test_stringfield():
    field = StringField(0x10)

    assert field.size == 0x10
    assert len(field.raw) == field.size
    assert field.raw == b'\x00' * field.size

    with pytest.raises(ValueError):
        field.value = b'kebab'

    data = bytes(range(0x10))

    field.value = data

    assert field.value == data
    assert field.raw == data

    with pytest.raises(StructuralError):
        StringField(4).read(b'\x00\x01')


def test_stringfield_unbounded():
    field = StringField()

    assert field.read(b'everything') == b'everything'
    assert field.size == 10


def test_cstringfield():
    field = CStringField()
    field.value = 'kebab'

    assert field.raw == b'kebab\x00'
    assert field.size == 6
    assert field.read(b'miao\x00bau') == b'miao'

    with pytest.raises(StructuralError):
        CStringField().read(b'unterminated')


def test_cstringfield_static_length():
    field = CStringField(static_length=8)
    field.value = b'abc'

    assert field.raw == b'abc\x00\x00\x00\x00\x00'
    assert field.size == 8
    assert field.read(b'kebab\x00\x00\x00') == b'kebab'


def test_intstringfield():
    field = IntStringField()
    field.value = b'kebab'

    # the prefix is updated only explicitly
    assert field.raw == b'\x00kebab'

    field.calc_length()

    assert field.raw == b'\x05kebab'
    assert IntStringField().read(b'\x03abcdef') == b'abc'

    with pytest.raises(StructuralError):
        IntStringField().read(b'\x05ab')


def test_arrayfield_fixed():
    array = ArrayField(StructField('H'), n=3)

    assert len(array) == 3
    assert array.raw == b'\x00' * 6

    array.read(b'\x00\x01\x00\x02\x00\x03\x00\x04')

    assert [_.value for _ in array] == [1, 2, 3]


def test_arrayfield_canary():
    array = ArrayField(StructField('B'), canary=lambda element: element.value == 0)

    array.read(b'\x01\x02\x00\x03')

    assert [_.value for _ in array] == [1, 2, 0]
    assert array.size == 3


def test_arrayfield_list_like():
    array = ArrayField(StructField('B'))

    first = array.append(1)
    array.append(2)
    array.append(3)

    assert array[0] is first
    assert [_.value for _ in array] == [1, 2, 3]
    assert array.raw == b'\x01\x02\x03'

    array.remove(first)
    assert [_.value for _ in array] == [2, 3]

    assert array.pop().value == 3
    array.clear()
    assert len(array) == 0

    with pytest.raises(ValueError):
        array.remove(first)
