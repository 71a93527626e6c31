"""
Field/method descriptors and generic signatures.

Both are parsed with the Lark grammar in ``descriptor.lark`` into the same
small type model, so a descriptor is simply a signature without generics.
See JVMS 4.3 and 4.7.9.1.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from lark import Lark, Transformer
from lark.exceptions import LarkError

from .errors import DescriptorError


GRAMMAR_FILE = Path(__file__).parent / "descriptor.lark"

_START_RULES = [
    "field_descriptor",
    "method_descriptor",
    "class_signature",
    "method_signature",
    "field_signature",
]

_BASE_TYPE_NAMES = {
    "B": "byte", "C": "char", "D": "double", "F": "float",
    "I": "int", "J": "long", "S": "short", "Z": "boolean", "V": "void",
}

_WILDCARDS = {"+": "extends", "-": "super"}


class TypeSignature(ABC):
    """Base class for type signatures."""

    @abstractmethod
    def java_name(self, qualified: bool = True) -> str:
        """Render the type as it would appear in Java source."""
        pass

    @abstractmethod
    def erasure(self) -> str:
        """Return the erased JVM descriptor of this type."""
        pass

    def __str__(self) -> str:
        return self.java_name()


@dataclass(frozen=True)
class BaseType(TypeSignature):
    """Primitive type (B, C, D, F, I, J, S, Z) or void (V)."""
    descriptor: str

    @property
    def name(self) -> str:
        return _BASE_TYPE_NAMES[self.descriptor]

    def java_name(self, qualified: bool = True) -> str:
        return self.name

    def erasure(self) -> str:
        return self.descriptor


@dataclass(frozen=True)
class TypeVariable(TypeSignature):
    """Type variable reference (T<name>;)."""
    name: str

    def java_name(self, qualified: bool = True) -> str:
        return self.name

    def erasure(self) -> str:
        return "Ljava/lang/Object;"


@dataclass(frozen=True)
class ArrayType(TypeSignature):
    """Array type ([<element>), with nested arrays folded into ``dimensions``."""
    element: TypeSignature
    dimensions: int = 1

    def java_name(self, qualified: bool = True) -> str:
        return self.element.java_name(qualified) + "[]" * self.dimensions

    def erasure(self) -> str:
        return "[" * self.dimensions + self.element.erasure()


@dataclass(frozen=True)
class TypeArgument:
    """A type argument in a parameterized type."""
    wildcard: Optional[str]  # None, '+' (extends), '-' (super), or '*' (unbounded)
    signature: Optional[TypeSignature]  # None for unbounded wildcard '*'

    def java_name(self, qualified: bool = True) -> str:
        if self.wildcard == "*":
            return "?"
        name = self.signature.java_name(qualified)
        if self.wildcard:
            return f"? {_WILDCARDS[self.wildcard]} {name}"
        return name


def _render_arguments(args: tuple[TypeArgument, ...], qualified: bool) -> str:
    if not args:
        return ""
    return "<" + ", ".join(a.java_name(qualified) for a in args) + ">"


@dataclass(frozen=True)
class SimpleClassType:
    """One segment of a class type, with optional type arguments."""
    name: str
    type_arguments: tuple[TypeArgument, ...] = ()


@dataclass(frozen=True)
class ClassType(TypeSignature):
    """Class type (L<package>/<name><type_args>;)."""
    package: str  # e.g., "java/lang"
    simple_type: SimpleClassType
    inner_types: tuple[SimpleClassType, ...] = ()

    @property
    def full_name(self) -> str:
        """Return the internal class name without type arguments."""
        base = f"{self.package}/{self.simple_type.name}" if self.package else self.simple_type.name
        for inner in self.inner_types:
            base = f"{base}${inner.name}"
        return base

    @property
    def type_arguments(self) -> tuple[TypeArgument, ...]:
        """Type arguments of the innermost segment."""
        if self.inner_types:
            return self.inner_types[-1].type_arguments
        return self.simple_type.type_arguments

    def java_name(self, qualified: bool = True) -> str:
        name = self.simple_type.name
        if qualified and self.package:
            name = self.package.replace("/", ".") + "." + name
        parts = [name + _render_arguments(self.simple_type.type_arguments, qualified)]
        for inner in self.inner_types:
            parts.append(inner.name + _render_arguments(inner.type_arguments, qualified))
        return ".".join(parts)

    def erasure(self) -> str:
        return f"L{self.full_name};"


@dataclass(frozen=True)
class TypeParameter:
    """A type parameter declaration (e.g., T extends Object)."""
    name: str
    class_bound: Optional[TypeSignature]  # may be None
    interface_bounds: tuple[TypeSignature, ...] = ()

    def java_name(self, qualified: bool = True) -> str:
        bounds = [b for b in (self.class_bound, *self.interface_bounds) if b is not None]
        bounds = [b for b in bounds
                  if not (isinstance(b, ClassType) and b.full_name == "java/lang/Object")]
        if not bounds:
            return self.name
        return f"{self.name} extends " + " & ".join(b.java_name(qualified) for b in bounds)


@dataclass(frozen=True)
class ClassSignature:
    """A class signature with type parameters and superclass/interfaces."""
    type_parameters: tuple[TypeParameter, ...]
    superclass: ClassType
    interfaces: tuple[ClassType, ...]


@dataclass(frozen=True)
class MethodSignature:
    """Parameter and return types of a method.

    Produced both from plain method descriptors (no type parameters, no
    throws) and from generic method signatures.
    """
    parameter_types: tuple[TypeSignature, ...]
    return_type: TypeSignature
    type_parameters: tuple[TypeParameter, ...] = ()
    throws: tuple[TypeSignature, ...] = ()

    def erasure(self) -> str:
        params = "".join(p.erasure() for p in self.parameter_types)
        return f"({params}){self.return_type.erasure()}"


def _split_binary_name(name: str) -> tuple[str, str]:
    package, _, simple = name.rpartition("/")
    return package, simple


class DescriptorTransformer(Transformer):
    """Transforms Lark parse trees into the type model."""

    def _to_tuple(self, items, kind) -> tuple:
        return tuple(item for item in items if isinstance(item, kind))

    # ==================== DESCRIPTORS ====================

    def field_descriptor(self, items):
        return items[0]

    def method_descriptor(self, items):
        return MethodSignature(parameter_types=tuple(items[:-1]), return_type=items[-1])

    def object_type(self, items):
        package, simple = _split_binary_name(items[0])
        return ClassType(package=package, simple_type=SimpleClassType(simple))

    def array_type(self, items):
        element = items[0]
        if isinstance(element, ArrayType):
            return ArrayType(element.element, element.dimensions + 1)
        return ArrayType(element)

    # ==================== SIGNATURES ====================

    def class_signature(self, items):
        type_params = ()
        if items and isinstance(items[0], tuple):
            type_params, items = items[0], items[1:]
        return ClassSignature(
            type_parameters=type_params,
            superclass=items[0],
            interfaces=tuple(items[1:]),
        )

    def method_signature(self, items):
        type_params = ()
        if items and isinstance(items[0], tuple):
            type_params, items = items[0], items[1:]
        params = []
        throws = []
        for item in items:
            if isinstance(item, _Throws):
                throws.append(item.signature)
            else:
                params.append(item)
        # The result type is the last non-throws item
        return_type = params.pop()
        return MethodSignature(
            parameter_types=tuple(params),
            return_type=return_type,
            type_parameters=type_params,
            throws=tuple(throws),
        )

    def field_signature(self, items):
        return items[0]

    def type_parameters(self, items):
        return tuple(items)

    def type_parameter(self, items):
        interface_bounds = self._to_tuple(items, _InterfaceBound)
        return TypeParameter(
            name=str(items[0]),
            class_bound=items[1],
            interface_bounds=tuple(b.signature for b in interface_bounds),
        )

    def interface_bounded_type_parameter(self, items):
        interface_bounds = self._to_tuple(items, _InterfaceBound)
        return TypeParameter(
            name=str(items[0]),
            class_bound=None,
            interface_bounds=tuple(b.signature for b in interface_bounds),
        )

    def interface_bound(self, items):
        return _InterfaceBound(items[0])

    def class_type_signature(self, items):
        package, simple = _split_binary_name(items[0])
        type_args = ()
        inner = []
        for item in items[1:]:
            if isinstance(item, SimpleClassType):
                inner.append(item)
            else:
                type_args = item
        return ClassType(
            package=package,
            simple_type=SimpleClassType(simple, type_args),
            inner_types=tuple(inner),
        )

    def inner_class_suffix(self, items):
        type_args = items[1] if len(items) > 1 else ()
        return SimpleClassType(str(items[0]), type_args)

    def type_variable_signature(self, items):
        return TypeVariable(str(items[0]))

    def array_type_signature(self, items):
        return self.array_type(items)

    def type_arguments(self, items):
        return tuple(items)

    def type_argument(self, items):
        if len(items) == 2:
            return TypeArgument(wildcard=str(items[0]), signature=items[1])
        return TypeArgument(wildcard=None, signature=items[0])

    def unbounded_type_argument(self, items):
        return TypeArgument(wildcard="*", signature=None)

    def throws_signature(self, items):
        return _Throws(items[0])

    # ==================== SHARED ====================

    def base_type(self, items):
        return BaseType(str(items[0]))

    def void_type(self, items):
        return BaseType("V")

    def binary_name(self, items):
        return "/".join(str(item) for item in items)


@dataclass(frozen=True)
class _InterfaceBound:
    signature: TypeSignature


@dataclass(frozen=True)
class _Throws:
    signature: TypeSignature


@lru_cache(maxsize=1)
def _parser() -> Lark:
    with open(GRAMMAR_FILE, "r") as f:
        grammar = f.read()
    return Lark(grammar, parser="lalr", start=_START_RULES)


def _parse(text: str, start: str):
    try:
        tree = _parser().parse(text, start=start)
    except LarkError as e:
        raise DescriptorError(f"Malformed {start.replace('_', ' ')} {text!r}: {e}") from e
    return DescriptorTransformer().transform(tree)


@lru_cache(maxsize=4096)
def parse_field_descriptor(descriptor: str) -> TypeSignature:
    """Parse a field descriptor such as ``[Ljava/lang/String;``."""
    return _parse(descriptor, "field_descriptor")


@lru_cache(maxsize=4096)
def parse_method_descriptor(descriptor: str) -> MethodSignature:
    """Parse a method descriptor such as ``(IJ)V``."""
    return _parse(descriptor, "method_descriptor")


@lru_cache(maxsize=1024)
def parse_class_signature(signature: str) -> ClassSignature:
    """Parse a class signature string."""
    return _parse(signature, "class_signature")


@lru_cache(maxsize=4096)
def parse_method_signature(signature: str) -> MethodSignature:
    """Parse a method signature string."""
    return _parse(signature, "method_signature")


@lru_cache(maxsize=4096)
def parse_field_signature(signature: str) -> TypeSignature:
    """Parse a field type signature string."""
    return _parse(signature, "field_signature")
