"""Business error taxonomies declared as exception classes.

A direct subclass of BizError is a taxonomy root; its class keywords set the
taxonomy configuration. Direct subclasses of a root are its variants, and
their codes are assigned in declaration order as each class is created.

Example:
    >>> class AppError(BizError, auto_start=1000, auto_increment=10):
    ...     '''Application errors.'''
    >>>
    >>> class UserNotFound(AppError, message="User not found: {user_id}"):
    ...     user_id: int
    >>>
    >>> class InvalidInput(AppError, code=2001, message="Invalid input: {field}"):
    ...     field: str
    >>>
    >>> class DatabaseError(AppError, message="Database connection failed", wraps=OSError):
    ...     pass
    >>>
    >>> err = UserNotFound(user_id=7)
    >>> err.code, err.name, str(err)
    (1000, 'UserNotFound', 'User not found: 7')
    >>> AppError.convert(OSError("disk full")).code
    1010
"""

from __future__ import annotations

import inspect
import string
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, get_origin, runtime_checkable

from bizerror.foundation.errors import ConversionError, TaxonomyDefinitionError
from bizerror.observability import get_logger

from .assigner import CodeTable, Shape, VariantDeclaration, assign_codes
from .codes import Code, TaxonomyConfig

if TYPE_CHECKING:
    from bizerror.context.contextual import ContextualError

_log = get_logger("bizerror.taxonomy")

_UNSET: Any = object()
_CONFIG_KEYS = ("code_type", "auto_start", "auto_increment", "allow_zero")
_RESERVED_FIELDS = frozenset({"code", "name", "message", "context", "args"})


@runtime_checkable
class Classified(Protocol):
    """Anything exposing a business code and a variant name.

    BizError variants, ContextualError and BizErrors all satisfy it, as does
    any hand-written exception with ``code`` and ``name`` attributes.
    """

    @property
    def code(self) -> Code: ...

    @property
    def name(self) -> str: ...


class BizError(Exception):
    """Base class of every business error taxonomy.

    Class keywords on a taxonomy root: code_type, auto_start, auto_increment,
    allow_zero. Class keywords on a variant: code, message, wraps.
    """

    __taxonomy__: ClassVar[type[BizError] | None] = None

    # Root-level state
    _config: ClassVar[TaxonomyConfig]
    _declarations: ClassVar[list[VariantDeclaration]]
    _variants: ClassVar[dict[str, type[BizError]]]
    _code_table: ClassVar[CodeTable]
    _wraps_index: ClassVar[dict[type[BaseException], type[BizError]]]

    # Variant-level state
    variant_name: ClassVar[str]
    variant_code: ClassVar[Code]
    variant_message: ClassVar[str]
    variant_wraps: ClassVar[tuple[type[BaseException], ...]] = ()
    _shape: ClassVar[Shape]
    _fields: ClassVar[tuple[str, ...]] = ()
    _defaults: ClassVar[dict[str, Any]]
    _arity: ClassVar[int] = 0

    def __init_subclass__(
        cls,
        *,
        code: Code | None = None,
        message: str | None = None,
        wraps: type[BaseException] | tuple[type[BaseException], ...] = (),
        code_type: Any = _UNSET,
        auto_start: Any = _UNSET,
        auto_increment: Any = _UNSET,
        allow_zero: Any = _UNSET,
        **kwargs: Any,
    ) -> None:
        super().__init_subclass__(**kwargs)
        options = {k: v for k, v in zip(_CONFIG_KEYS, (code_type, auto_start, auto_increment, allow_zero))
                   if v is not _UNSET}
        parents = [b for b in cls.__bases__ if issubclass(b, BizError)]
        if parents == [BizError]:
            if code is not None or message is not None or wraps:
                raise TaxonomyDefinitionError("code, message and wraps belong on variants, not on the taxonomy root",
                                              taxonomy=cls.__name__)
            _define_root(cls, options)
            return
        if len(parents) != 1 or parents[0].__taxonomy__ is not parents[0]:
            raise TaxonomyDefinitionError(
                "variants must subclass exactly one taxonomy root; variants cannot be subclassed",
                taxonomy=parents[0].__taxonomy__.__name__ if parents and parents[0].__taxonomy__ else None,
                variant=cls.__name__,
            )
        if options:
            raise TaxonomyDefinitionError(f"{', '.join(options)} can only be set on the taxonomy root",
                                          taxonomy=parents[0].__name__, variant=cls.__name__)
        _define_variant(parents[0], cls, code, message, wraps)

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        cls = type(self)
        if cls.__taxonomy__ is None or cls.__taxonomy__ is cls:
            raise TypeError(f"{cls.__name__} is a taxonomy root; instantiate one of its variants")
        match cls._shape:
            case "unit":
                if args or kwargs:
                    raise TypeError(f"{cls.__name__} takes no payload")
                super().__init__()
            case "positional":
                if kwargs:
                    raise TypeError(f"{cls.__name__} takes positional payload only, got {', '.join(kwargs)}")
                if len(args) < cls._arity:
                    raise TypeError(f"{cls.__name__} takes at least {cls._arity} payload value(s), got {len(args)}")
                super().__init__(*args)
                if cause := next((a for a in args if cls.variant_wraps and isinstance(a, cls.variant_wraps)), None):
                    self.__cause__ = cause
            case "named":
                values = _bind_fields(cls, args, kwargs)
                for f in cls._fields:
                    setattr(self, f, values[f])
                super().__init__(*(values[f] for f in cls._fields))

    def __setattr__(self, name: str, value: Any) -> None:
        if name in type(self)._fields and name in self.__dict__:
            raise AttributeError(f"{type(self).__name__}.{name} is immutable")
        super().__setattr__(name, value)

    # ─── Classification ─────────────────────────────────────────────────

    @property
    def code(self) -> Code:
        return type(self).variant_code

    @property
    def name(self) -> str:
        return type(self).variant_name

    def render(self) -> str:
        """Display message. Override for formatting beyond the message template."""
        cls = type(self)
        if cls._shape == "named":
            return cls.variant_message.format(**{f: getattr(self, f) for f in cls._fields})
        return cls.variant_message.format(*self.args)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        root = type(self).__taxonomy__
        parts = [f"variant={self.name!r}", f"code={self.code!r}", f"message={str(self)!r}"]
        if self.__cause__ is not None:
            parts.append(f"source={self.__cause__!r}")
        return f"{root.__name__ if root else type(self).__name__}({', '.join(parts)})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BizError):
            return NotImplemented
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.variant_code))

    def __reduce__(self):
        # Fields are rebuilt from args; restoring them as state would trip immutability
        state = {k: v for k, v in self.__dict__.items() if k not in type(self)._fields}
        return type(self), self.args, state or None

    def with_context(self, context: str) -> ContextualError[BizError]:
        """Wrap this error with context, recording the caller's location."""
        from bizerror.context.contextual import ContextualError
        return ContextualError(self, context, stacklevel=2)

    # ─── Taxonomy Introspection ─────────────────────────────────────────

    @classmethod
    def convert(cls, error: BaseException) -> BizError:
        """Convert any error into this taxonomy.

        Members of the taxonomy pass through. Other exceptions are built into
        the first variant wrapping their type, most specific type first.

        Raises:
            ConversionError: No variant wraps the error's type
        """
        root = _root_of(cls)
        if isinstance(error, root):
            return error
        for t in type(error).__mro__:
            if (variant := root._wraps_index.get(t)) is not None:
                converted = variant(error)
                converted.__cause__ = error
                _log.debug("error converted", taxonomy=root.__name__, source=type(error).__name__,
                           variant=variant.variant_name, code=variant.variant_code)
                return converted
        raise ConversionError(error, root)

    @classmethod
    def config(cls) -> TaxonomyConfig:
        return _root_of(cls)._config

    @classmethod
    def code_table(cls) -> CodeTable:
        """Effective codes of every variant declared so far."""
        return _root_of(cls)._code_table

    @classmethod
    def variants(cls) -> dict[str, type[BizError]]:
        """Variant classes by name, in declaration order."""
        return dict(_root_of(cls)._variants)

    @classmethod
    def declarations(cls) -> list[VariantDeclaration]:
        return list(_root_of(cls)._declarations)


def is_classified(obj: object) -> bool:
    """Whether obj exposes code and name, checked without evaluating either.

    An empty aggregate carries no code and does not count as classified.
    """
    if isinstance(obj, BizError):
        return True
    if any(inspect.getattr_static(obj, attr, _UNSET) is _UNSET for attr in ("code", "name")):
        return False
    is_empty = getattr(obj, "is_empty", None)
    return not (callable(is_empty) and is_empty())


def convert_into(error: object, target: type | None) -> Any:
    """Convert error into target, or require it to be classified when target is None."""
    if target is None:
        if is_classified(error):
            return error
        raise ConversionError(error)
    if isinstance(error, target):
        return error
    if (convert := getattr(target, "convert", None)) is None or not isinstance(error, BaseException):
        raise ConversionError(error, target)
    return convert(error)


# ─────────────────────────────────────────────────────────────────────────────
# Definition Helpers
# ─────────────────────────────────────────────────────────────────────────────


def _root_of(cls: type[BizError]) -> type[BizError]:
    if cls.__taxonomy__ is None:
        raise TypeError(f"{cls.__name__} is not part of a taxonomy")
    return cls.__taxonomy__


def _define_root(cls: type[BizError], options: dict[str, Any]) -> None:
    cls._config = TaxonomyConfig.build(cls.__name__, **options)
    cls.__taxonomy__ = cls
    cls._declarations = []
    cls._variants = {}
    cls._code_table = CodeTable({})
    cls._wraps_index = {}
    _log.debug("taxonomy registered", taxonomy=cls.__name__, code_type=cls._config.code_type.value,
               auto_start=cls._config.auto_start, auto_increment=cls._config.auto_increment)


def _define_variant(
    root: type[BizError],
    cls: type[BizError],
    code: Code | None,
    message: str | None,
    wraps: type[BaseException] | tuple[type[BaseException], ...],
) -> None:
    taxonomy, variant = root.__name__, cls.__name__
    wraps = wraps if isinstance(wraps, tuple) else (wraps,)
    if not all(isinstance(t, type) and issubclass(t, BaseException) for t in wraps):
        raise TaxonomyDefinitionError("wraps must be exception types", taxonomy=taxonomy, variant=variant)
    template = variant if message is None else message
    fields = _payload_fields(cls, taxonomy)
    shape = _shape_of(template, fields, wraps, taxonomy, variant)
    defaults = {f: cls.__dict__[f] for f in fields if f in cls.__dict__}
    arity = _positional_arity(template, taxonomy, variant) if shape == "positional" else 0
    if wraps:
        # convert() builds the variant from the wrapped error alone
        required = [f for f in fields if f not in defaults]
        if arity > 1 or required[1:] or (required and required[0] != fields[0]):
            raise TaxonomyDefinitionError("a wrapping variant can take at most one payload value, the wrapped error",
                                          taxonomy=taxonomy, variant=variant)
    decl = VariantDeclaration(name=variant, code=code, message=template, shape=shape, fields=fields, wraps=wraps)

    table = assign_codes([*root._declarations, decl], root._config, taxonomy=taxonomy)
    root._declarations.append(decl)
    root._variants[variant] = cls
    root._code_table = table
    for t in wraps:
        root._wraps_index.setdefault(t, cls)

    cls.variant_name = variant
    cls.variant_code = table[variant]
    cls.variant_message = template
    cls.variant_wraps = wraps
    cls._shape = shape
    cls._fields = fields
    cls._defaults = defaults
    cls._arity = arity

    _log.debug("variant registered", taxonomy=taxonomy, variant=variant, code=cls.variant_code,
               explicit=decl.is_explicit, shape=shape)
    if len(shared := table.names_for(cls.variant_code)) > 1:
        _log.debug("duplicate code", taxonomy=taxonomy, code=cls.variant_code, variants=shared)


def _payload_fields(cls: type, taxonomy: str) -> tuple[str, ...]:
    fields = tuple(n for n, ann in inspect.get_annotations(cls).items() if not _is_classvar(ann))
    reserved = _RESERVED_FIELDS | {n for n in dir(BizError) if not n.startswith("_")}
    if clash := sorted(set(fields) & reserved):
        raise TaxonomyDefinitionError(f"payload field(s) {', '.join(clash)} are reserved",
                                      taxonomy=taxonomy, variant=cls.__name__)
    return fields


def _is_classvar(annotation: object) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or get_origin(annotation) is ClassVar


def _shape_of(
    template: str,
    fields: tuple[str, ...],
    wraps: tuple[type[BaseException], ...],
    taxonomy: str,
    variant: str,
) -> Shape:
    try:
        names = {_root_name(f) for _, f, _, _ in string.Formatter().parse(template) if f is not None}
    except ValueError as e:
        raise TaxonomyDefinitionError(f"malformed message template: {e}", taxonomy=taxonomy, variant=variant) from e
    positional = {n for n in names if n == "" or n.isdigit()}
    if fields:
        if positional or not names <= set(fields):
            unknown = sorted(names - set(fields)) or sorted(positional)
            raise TaxonomyDefinitionError(f"message references unknown field(s): {unknown}",
                                          taxonomy=taxonomy, variant=variant)
        return "named"
    if names - positional:
        raise TaxonomyDefinitionError(f"message references undeclared field(s): {sorted(names - positional)}",
                                      taxonomy=taxonomy, variant=variant)
    return "positional" if positional or wraps else "unit"


def _positional_arity(template: str, taxonomy: str, variant: str) -> int:
    """Number of payload values a positional message template needs."""
    names = [_root_name(f) for _, f, _, _ in string.Formatter().parse(template) if f is not None]
    numbered = [int(n) for n in names if n]
    if numbered and len(numbered) != len(names):
        raise TaxonomyDefinitionError("message mixes {} and numbered placeholders",
                                      taxonomy=taxonomy, variant=variant)
    return max(numbered) + 1 if numbered else len(names)


def _root_name(field: str) -> str:
    for i, ch in enumerate(field):
        if ch in ".[":
            return field[:i]
    return field


def _bind_fields(cls: type[BizError], args: tuple[Any, ...], kwargs: dict[str, Any]) -> dict[str, Any]:
    fields = cls._fields
    if len(args) > len(fields):
        raise TypeError(f"{cls.__name__} takes at most {len(fields)} payload value(s), got {len(args)}")
    values = dict(zip(fields, args))
    for k, v in kwargs.items():
        if k not in fields:
            raise TypeError(f"{cls.__name__} got an unexpected field {k!r}")
        if k in values:
            raise TypeError(f"{cls.__name__} got multiple values for field {k!r}")
        values[k] = v
    if missing := [f for f in fields if f not in values and f not in cls._defaults]:
        raise TypeError(f"{cls.__name__} missing field(s): {', '.join(missing)}")
    return {f: values[f] if f in values else cls._defaults[f] for f in fields}
