from abc import ABCMeta, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Sequence


class TypeRegistryAdapter(metaclass=ABCMeta):
    """
    Read-only view on the declared type hierarchies. Implementations answer which
    subtypes a base type has and which field discriminates between them. Neither
    method may have side effects.
    """

    @abstractmethod
    def get_subtypes(self, base_type) -> Sequence[Any]:
        pass  # pragma: no cover

    @abstractmethod
    def get_discriminator_name(self, base_type) -> Optional[str]:
        pass  # pragma: no cover


class RegistryEntry:
    def __init__(self, base_type, subtypes=None, discriminator=None):
        self.base_type = base_type
        self.subtypes: List[Any] = list(subtypes or [])
        self.discriminator: Optional[str] = discriminator

    def add_subtype(self, subtype) -> None:
        if subtype not in self.subtypes:
            self.subtypes.append(subtype)

    def __repr__(self):
        return (
            f'RegistryEntry({self.base_type!r}, subtypes={self.subtypes!r}, '
            f'discriminator={self.discriminator!r})'
        )


class TypeRegistry(TypeRegistryAdapter):
    """
    In-process registry of closed type hierarchies.

    .. code-block:: python

        @type_registry.polymorphic_base(discriminator='ObjectType')
        class AnimalSerializer(serializers.Serializer):
            ...

        @type_registry.subtype_of(AnimalSerializer)
        class DogSerializer(AnimalSerializer):
            ...

    Subtypes keep their registration order and are never listed twice.
    """

    def __init__(self):
        self._entries: Dict[Any, RegistryEntry] = {}

    def register(self, base_type, subtypes=(), discriminator=None) -> RegistryEntry:
        entry = self._entries.get(base_type)
        if entry is None:
            entry = self._entries[base_type] = RegistryEntry(base_type)
        for subtype in subtypes:
            entry.add_subtype(subtype)
        if discriminator is not None:
            entry.discriminator = discriminator
        return entry

    def register_subtype(self, base_type, subtype) -> RegistryEntry:
        return self.register(base_type, subtypes=[subtype])

    def set_discriminator(self, base_type, discriminator: str) -> RegistryEntry:
        return self.register(base_type, discriminator=discriminator)

    def polymorphic_base(self, discriminator: str):
        """ class decorator declaring the decorated class as base with the given discriminator """
        def decorator(klass):
            self.set_discriminator(klass, discriminator)
            return klass
        return decorator

    def subtype_of(self, base_type):
        """ class decorator declaring the decorated class as subtype of ``base_type`` """
        def decorator(klass):
            self.register_subtype(base_type, klass)
            return klass
        return decorator

    def get_entry(self, base_type) -> Optional[RegistryEntry]:
        return self._entries.get(base_type)

    def get_subtypes(self, base_type) -> Sequence[Any]:
        entry = self._entries.get(base_type)
        return tuple(entry.subtypes) if entry else ()

    def get_discriminator_name(self, base_type) -> Optional[str]:
        entry = self._entries.get(base_type)
        return entry.discriminator if entry else None

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, base_type) -> bool:
        return base_type in self._entries

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


type_registry = TypeRegistry()
