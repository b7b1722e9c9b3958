from enum import IntEnum

import pytest

from netstruct.core import Chunk
from netstruct.meta import Compliant, Endianess
from netstruct.dispatch import TypeRegistry
from netstruct.exceptions import StructuralError
from netstruct.fields import StructField, StringField, BitField, ArrayField, SubstructureArrayField
from netstruct.properties import Dependency, RatioDependency, OffsetDependency


def test_chunk():
    """Check that building a Chunk from fields behaves correctly."""
    class Dummy(Chunk):
        a = StructField('I', default=0xbad, endianess=Endianess.LITTLE_ENDIAN)
        b = StringField(0x10)
        c = StructField('I', default=0xdeadbeef, endianess=Endianess.LITTLE_ENDIAN)

    dummy = Dummy()

    assert dummy.a.size == 4
    assert dummy.a.raw == b'\xad\x0b\x00\x00'
    assert dummy.a.value == 0xbad
    assert dummy.offset_of('a') == 0x00
    assert dummy.a.father is dummy

    assert dummy.b.size == 0x10
    assert dummy.b.raw == b'\x00' * 0x10
    assert dummy.offset_of('b') == 0x04

    assert dummy.c.size == 0x4
    assert dummy.c.raw == b'\xef\xbe\xad\xde'
    assert dummy.offset_of('c') == 0x14

    assert dummy.size == 0x18
    assert len(dummy.raw) == dummy.size
    assert dummy.raw == (
        b'\xad\x0b\x00\x00' +
        b'\x00' * 0x10 +
        b'\xef\xbe\xad\xde'
    )


def test_instances_do_not_share_fields():
    class Dummy(Chunk):
        a = StructField('B')

    first, second = Dummy(), Dummy()
    first.a.value = 1

    assert first.get('a') == 1
    assert second.get('a') == 0
    assert Dummy.a.value == 0


def test_chunk_w_dependencies():
    class Example(Chunk):
        sz = StructField('B')
        data = StringField(Dependency('.sz'))

    example = Example(b'\x05kebabrest')

    assert example.sz.father is example
    assert example.get('sz') == 5
    assert example.get('data') == b'kebab'
    assert example.body == b'rest'
    assert example.pack() == b'\x05kebabrest'


def test_chunk_error_chain():
    class Example(Chunk):
        sz = StructField('B')
        data = StringField(Dependency('.sz'))

    class Outer(Chunk):
        magic = StructField('B')
        inner = Example()

    with pytest.raises(StructuralError) as e:
        Example(b'\x09kebab')

    assert e.value.chain == ['data']

    with pytest.raises(StructuralError) as e:
        Outer(b'\x01\x09kebab')

    assert e.value.chain == ['inner', 'data']
    assert str(e.value).startswith('inner.data: ')


def test_proxy_like_format():
    """Check that a format having sub-components of the same type behaves gently."""

    class Proxy(Chunk):
        off = StructField('I')
        sz = StructField('I')

    class Experiment(Chunk):
        proxy_a = Proxy()
        proxy_b = Proxy()

        contents = StringField(0x100)

    experiment = Experiment()

    assert experiment.layout == {
        'proxy_a': (0, 8),
        'proxy_b': (8, 8),
        'contents': (16, 256),
    }

    assert experiment.size == 0x100 + 2 * (4 + 4)
    assert len(experiment.raw) == experiment.size
    assert experiment.raw == b'\x00' * experiment.size

    experiment.proxy_a.off.value = 1

    assert experiment.proxy_b.get('off') == 0
    assert experiment.to_dict()['proxy_a'] == {'off': 1, 'sz': 0}


def test_inheritance():
    class Base(Chunk):
        a = StructField('B')
        b = StructField('B')
        c = StructField('B')

    class Child(Base):
        b = StructField('H', default=0x0102)
        d = StructField('B', default=4)

    assert [name for name, _ in Child().get_fields()] == ['a', 'b', 'c', 'd']
    assert Child().pack() == b'\x00\x01\x02\x00\x04'
    assert Base().pack() == b'\x00\x00\x00'


def test_meta_order_and_defaults():
    class Reordered(Chunk):
        a = StructField('B')
        b = StructField('B')

        class Meta:
            order = ['b', 'a']
            defaults = {'a': 1}

    assert Reordered().pack() == b'\x00\x01'
    assert Reordered(b'\x02\x03').get('a') == 3


def test_bit_fields():
    class Flags(Chunk):
        vihl = BitField('B', [('version', 4), ('ihl', 4)], default=0x45)
        tos = StructField('B')

    flags = Flags(ihl=6, tos=1)

    assert flags.get('ihl') == 6
    assert flags.has_field('version')
    assert flags.pack() == b'\x46\x01'
    assert flags.to_dict() == {
        'vihl': 0x46,
        'version': 4,
        'ihl': 6,
        'tos': 1,
    }

    with pytest.raises(AttributeError):
        Flags(unknown=1)


def test_derived_default():
    class Derived(Chunk):
        a = StructField('B', default=3)
        b = StructField('B', default=lambda chunk: chunk.get('a') * 2)

    assert Derived().get('b') == 6
    # computed once at construction, before the explicit values
    assert Derived(a=5).get('b') == 6


def test_optional_field():
    class WithOptional(Chunk):
        flag = StructField('B')
        extra = StructField('H', optional=lambda chunk: chunk.get('flag') == 1)

    absent = WithOptional(b'\x00\x12\x34')

    assert absent.body == b'\x12\x34'
    assert 'extra' not in absent.to_dict()

    present = WithOptional(b'\x01\x12\x34')

    assert present.get('extra') == 0x1234
    assert present.body == b''

    assert WithOptional(flag=0).pack() == b'\x00'
    assert WithOptional(flag=1, extra=2).pack() == b'\x01\x00\x02'


class Kind(IntEnum):
    FIRST = 1
    SECOND = 2


def test_enum_compliance_is_inherited():
    class Strict(Chunk):
        kind = StructField('B', enum=Kind)

    assert Strict(b'\x07').get('kind') == 7
    assert Strict(kind='SECOND').pack() == b'\x02'

    with pytest.raises(StructuralError) as e:
        Strict(b'\x07', compliant=Compliant.ENUM)

    assert e.value.chain == ['kind']


def test_calc_length():
    class Record(Chunk):
        kind = StructField('B')
        length = StructField('B')
        data = StringField(Dependency('.length'))

        class Meta:
            length_field = 'length'
            length_covers = ('data',)

    record = Record(kind=1, data=b'kebab')

    # lengths are recomputed only on request
    assert record.get('length') == 0

    record.calc_length()

    assert record.get('length') == 5
    assert record.pack() == b'\x01\x05kebab'


def test_calc_length_with_body():
    class WithBody(Chunk):
        length = StructField('H')

        class Meta:
            length_field = 'length'
            length_includes_body = True

    chunk = WithBody()
    chunk.body = 'abc'
    chunk.calc_length()

    assert chunk.get('length') == 5
    assert chunk.pack() == b'\x00\x05abc'


def test_array_counter():
    class Counted(Chunk):
        count = StructField('B')
        items = ArrayField(StructField('H'), n=Dependency('.count'))

    counted = Counted(b'\x03' + b'\x00\x01\x00\x02\x00\x03' + b'\x00\x04')

    assert len(counted.items) == 3
    assert [_.value for _ in counted.items] == [1, 2, 3]
    assert counted.body == b'\x00\x04'

    counted.items.append(5)
    assert counted.get('count') == 4

    counted.items.pop()
    assert counted.get('count') == 3

    counted.items.clear()
    assert counted.get('count') == 0
    assert counted.pack_fields() == b'\x00'


def test_array_budget():
    class Budgeted(Chunk):
        budget = StructField('B')
        items = ArrayField(StructField('H'), length=Dependency('.budget'))

    budgeted = Budgeted(b'\x04\x00\x01\x00\x02\xff\xff')

    assert [_.value for _ in budgeted.items] == [1, 2]
    assert budgeted.body == b'\xff\xff'

    # an element overruns the budget
    with pytest.raises(StructuralError) as e:
        Budgeted(b'\x03\x00\x01\x00\x02')

    assert e.value.chain == ['items']

    # the budget is larger than the data
    with pytest.raises(StructuralError):
        Budgeted(b'\x08\x00\x01')


class Element(Chunk):
    kind = StructField('B')


ELEMENTS = TypeRegistry(key='kind')


@ELEMENTS.register(1)
class Short(Element):
    payload = StructField('B')


class Long(Element):
    payload = StructField('I')


ELEMENTS.register(2, Long)


def test_array_dispatch():
    class Container(Chunk):
        elements = ArrayField(Element, dispatch=ELEMENTS)

    data = b'\x01\xaa' + b'\x02\x00\x00\x00\xbb' + b'\x03'
    container = Container(data)

    assert [type(_) for _ in container.elements] == [Short, Long, Element]
    assert container.elements[1].get('payload') == 0xbb
    assert container.elements[2].get('kind') == 3
    assert container.pack() == data

    element = container.elements.append({'kind': 2, 'payload': 0x11223344})

    assert isinstance(element, Long)
    assert element.father is container.elements
    assert container.pack() == data + b'\x02\x11\x22\x33\x44'


def test_substructure_markers():
    class Sub(Chunk):
        last = StructField('B')
        num = StructField('B')

    class Holder(Chunk):
        subs = SubstructureArrayField(Sub, more=2)

    holder = Holder()
    for num in range(1, 4):
        holder.subs.append({'num': num})

    assert [_.get('last') for _ in holder.subs] == [2, 2, 0]
    assert holder.pack() == b'\x02\x01\x02\x02\x00\x03'


def test_body_accepts_chunks():
    class Outer(Chunk):
        a = StructField('B', default=1)

    class Inner(Chunk):
        b = StructField('B', default=2)

    outer = Outer()
    outer.body = Inner()

    assert outer.body_raw == b'\x02'
    assert outer.pack() == b'\x01\x02'


def test_ratio_and_offset_dependencies():
    class Words(Chunk):
        words = StructField('B')
        data = StringField(RatioDependency(0.25, '.words'))

    class Shifted(Chunk):
        length = StructField('B')
        data = StringField(OffsetDependency(-1, '.length'))

    assert Words(b'\x02abcdefghij').get('data') == b'abcdefgh'
    assert Shifted(b'\x03abc').get('data') == b'ab'


def test_dependency_from_class():
    class Inner(Chunk):
        data = StringField(Dependency('@Outer.sz'))

    class Outer(Chunk):
        sz = StructField('B')
        inner = Inner()

    outer = Outer(b'\x03abcd')

    assert outer.inner.get('data') == b'abc'
    assert outer.body == b'd'


def test_field_named_data():
    class Record(Chunk):
        length = StructField('B')
        data = StringField(Dependency('.length'))

    record = Record(data=b'kebab')

    assert record.get('data') == b'kebab'
    assert record.body == b''
    assert Record(b'\x02abc').get('data') == b'ab'


def test_type_registry():
    registry = TypeRegistry(key='kind', default=Element)
    registry.register(Kind.FIRST, Short)
    registry.register(2, Long)

    assert 1 in registry
    assert Kind.SECOND in registry
    assert registry.resolve(Kind.FIRST) is Short
    assert registry.resolve(3) is Element
    assert dict(registry.items()) == {1: Short, 2: Long}

    registry.unregister(Kind.SECOND)

    assert 2 not in registry
    assert registry.resolve(2) is Element
    assert list(registry.items()) == [(1, Short)]
