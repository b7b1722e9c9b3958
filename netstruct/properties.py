import logging
from typing import List, Tuple


logger = logging.getLogger(__name__)


def get_root_from_chunk(instance):
    return get_instance_from_chunk(instance, condition=lambda x: x.father is None)


def get_instance_from_class_name(instance, name):
    return get_instance_from_chunk(instance, condition=lambda x: x.__class__.__name__ == name)


def get_instance_from_chunk(instance, condition):
    is_root = condition(instance)
    father = instance

    while not is_root:
        father = instance.father
        if father is None:
            raise AttributeError('no field satisfying the condition above %r' % instance)

        is_root = condition(father)
        instance = father

    return father


class Dependency:
    '''This makes the relation between fields possible.

    In practice this class allows to write something like

        class Simple(Chunk):
            length = fields.StructField('I')
            data = fields.StringField(n=Dependency('.length'))

    and have the length of the string contained in the field named 'data'
    read from the field named 'length' when unpacking. Nothing is written back
    automatically: recomputing the length is the job of calc_length().

    The syntax for defining the expression is inspired from module resolution
    with an extra element via the first char of the expression: we have the following

     - '.' indicates we refer to a field at the same level
     - '@' indicates the the first component is the name of a class
     - otherwise the resolution starts from the root

    The last component can be the name of a bit sub-field.
    '''
    def __init__(self, expression):
        self.expression = expression

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.expression})>'

    def _resolve_wrt_class(self, instance, fields_path: List[str]):
        class_name = fields_path[0][1:]
        logger.debug('resolve from class name: \'%s\'' % class_name)
        field = get_instance_from_class_name(instance, class_name)

        return field, fields_path[1:]  # skip the first one that is already resolved

    def resolve_container(self, instance) -> Tuple["Field", str]:
        '''Returns the chunk containing the referenced field and the name of the latter.'''
        logger.debug('trying to resolve \'%s\' using class \'%s\'' % (
            self.expression,
            self.__class__.__name__,
        ))

        # '.miao'.split(".") -> ['', 'miao']
        # 'miao'.split(".") -> ['miao']
        fields_path = self.expression.split('.')

        # find the root the resolution starts
        if fields_path[0] == '':  # we have a relative dependency
            field = instance.father
            fields_path = fields_path[1:]
        elif fields_path[0].startswith('@'):
            field, fields_path = self._resolve_wrt_class(instance, fields_path)
        else:
            field = get_root_from_chunk(instance)

        if field is None:
            raise AttributeError(f'cannot resolve {self.expression} from a field without father')

        # now we can resolve each component but the last one
        for component_name in fields_path[:-1]:
            field = getattr(field, component_name)
            logger.debug(' resolved sub-component "%s" from "%s"' % (
                field.__class__.__name__, component_name))

        return field, fields_path[-1]

    def resolve(self, instance):
        '''With this method we resolve the attribute with respect to the instance
        passed as argument.'''
        container, name = self.resolve_container(instance)
        value = container.get(name)

        logger.debug(' resolved with value %s' % value)

        return value

    def resolve_and_set(self, instance, value):
        """Write back a value, used to keep counters in sync."""
        if instance.father is None:
            return

        container, name = self.resolve_container(instance)
        container.set(name, value)


class RatioDependency(Dependency):

    def __init__(self, ratio, expression):
        super().__init__(expression)
        self._ratio = ratio

    def resolve(self, instance):
        value = super().resolve(instance)

        return int(value / self._ratio)

    def resolve_and_set(self, instance, value):
        super().resolve_and_set(instance, value * self._ratio)


class OffsetDependency(Dependency):
    '''The referenced value shifted by a constant, e.g. a length that
    includes some header bytes already consumed.'''

    def __init__(self, delta, expression):
        super().__init__(expression)
        self._delta = delta

    def resolve(self, instance):
        return super().resolve(instance) + self._delta

    def resolve_and_set(self, instance, value):
        super().resolve_and_set(instance, value - self._delta)
