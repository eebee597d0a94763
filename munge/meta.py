import logging


class FieldBase(object):
    '''Anything declared in the body of a Record that ends up in its schema.'''

    name = None

    def contribute_to_record(self, cls, name):
        if name in cls._meta.bindings:
            raise AttributeError(f'field {name} is already present in class {cls.__name__}')

        self.name = name
        cls._meta.fields.append(name)
        cls._meta.bindings[name] = self


class Meta(object):
    """Class containing metadata about the abstraction: the schema table
    with the fields in declaration order."""

    def __init__(self):
        self.fields = []
        self.bindings = {}

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(self.fields))

    def get_fields(self):
        return [(_, self.bindings[_]) for _ in self.fields]


class MetaRecord(type):

    def __new__(cls, names, bases, attrs):
        '''All of this is a big hack, maybe too inspired by how Django does a similar thing!'''
        module = attrs.pop('__module__')
        classcell = attrs.pop('__classcell__', None)

        new_attrs = {
            '__module__': module,
        }
        if classcell is not None:
            new_attrs['__classcell__'] = classcell
        new_cls = super(MetaRecord, cls).__new__(cls, names, bases, new_attrs)

        new_cls._meta = Meta()

        # handle inheritance
        parents = [_ for _ in bases if isinstance(_, MetaRecord)]
        for parent in parents:
            for obj_name, obj in parent._meta.get_fields():
                if obj_name not in new_cls._meta.bindings:
                    new_cls._meta.fields.append(obj_name)
                    new_cls._meta.bindings[obj_name] = obj

        cls.logger = logging.getLogger(__name__)

        for obj_name, obj in attrs.items():
            new_cls.add_to_class(obj_name, obj)

        return new_cls

    def add_to_class(cls, name, value):
        if hasattr(value, 'contribute_to_record'):
            cls.logger.debug('contribute_to_record() found for field \'%s\'' % name)
            value.contribute_to_record(cls, name)
        else:
            setattr(cls, name, value)
