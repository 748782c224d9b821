"""Declaring data-driven test cases.

Slots are described once, when the test function is decorated, either
explicitly::

    @data_driven(DataSource("items.xlsx"), slots=[data("libraryId", int), data("itemType")])
    def test_get_items(library_id, item_type):
        ...

or from the signature, where parameter names are column names::

    @data_driven(DataSource("items.xlsx"), fixed={"client": make_client})
    def test_get_items(libraryId: int, itemType, client):
        ...

The decorated function takes no arguments, so a host runner such as pytest
calls it once and every row runs inside that call.
"""

import functools
import inspect
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Sequence, get_type_hints

from rowdriven.context import DataSource
from rowdriven.exceptions import ConfigurationError
from rowdriven.logging_config import get_logger
from rowdriven.model import ParameterSlot, SlotKind, TestCaseReport, Value
from rowdriven.runner.execute import run_test_case

logger = get_logger("runner")

# Internal registry of declared test cases, in declaration order
_REGISTRY: List["TestCaseSpec"] = []

SOURCE_ATTR = "__rowdriven_source__"

_TRUE = {"true", "yes", "y", "1"}
_FALSE = {"false", "no", "n", "0"}


def _to_bool(value: Value):
    if value is None or isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"Cannot convert {value!r} to bool")


def converter_for(target: type) -> Optional[Callable[[Value], Any]]:
    """Converter from a normalized cell value to ``target``; absent stays None."""
    if target is bool:
        return _to_bool
    if target in (int, float, str):
        def _convert(value):
            if value is None or isinstance(value, target):
                return value
            return target(value)

        return _convert
    return None


def data(name: str, converter: Optional[Callable[[Value], Any]] = None) -> ParameterSlot:
    """Slot taking the value of column ``name`` from the active row."""
    if isinstance(converter, type):
        target = converter
        converter = converter_for(target) or (lambda v: None if v is None else target(v))
    return ParameterSlot(position=-1, name=name, kind=SlotKind.DATA, converter=converter)


def row(name: str = "row") -> ParameterSlot:
    """Slot receiving the whole active row as a dict."""
    return ParameterSlot(position=-1, name=name, kind=SlotKind.ROW)


def fixed(name: str, value: Any = None, provider: Optional[Callable[[], Any]] = None) -> ParameterSlot:
    """Slot with one value shared by every row.

    Pass either a constant ``value`` or a zero-argument ``provider``.
    """
    if provider is None:
        def provider():
            return value

    return ParameterSlot(position=-1, name=name, kind=SlotKind.FIXED, provider=provider)


def _type_hints(func: Callable) -> Dict[str, Any]:
    """Resolved annotations of ``func``, so postponed (string) annotations still pick converters."""
    try:
        return get_type_hints(func)
    except (NameError, TypeError) as e:
        logger.warning(
            f"Cannot resolve annotations of {func.__qualname__}: {e}; parameters get no converter",
            extra={"function": func.__qualname__},
        )
        return {}


def _slots_from_signature(parameters, fixed_values: Dict[str, Any], hints: Dict[str, Any]) -> List[ParameterSlot]:
    slots = []
    for param in parameters:
        annotation = hints.get(param.name, param.annotation)
        if param.name in fixed_values:
            value = fixed_values[param.name]
            slots.append(fixed(param.name, provider=value) if callable(value) else fixed(param.name, value))
        elif param.name == "row" or annotation in (dict, Dict):
            slots.append(row(param.name))
        elif annotation is not inspect.Parameter.empty and isinstance(annotation, type):
            slots.append(data(param.name, annotation))
        else:
            slots.append(data(param.name))
    return slots


@dataclass
class TestCaseSpec:
    """A decorated test case: its identifier, body, slots and data source."""

    __test__ = False

    test_case: str
    func: Callable
    slots: List[ParameterSlot]
    source: Optional[DataSource] = None
    is_method: bool = False
    out_dir: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def source_for(self, instance=None) -> Optional[DataSource]:
        if self.source is not None:
            return self.source
        if instance is not None:
            return getattr(type(instance), SOURCE_ATTR, None)
        return None

    def run(self, instance=None) -> TestCaseReport:
        if self.is_method and instance is None:
            raise ConfigurationError(f"Test case '{self.test_case}' is a method and needs an instance")
        body = functools.partial(self.func, instance) if self.is_method else self.func
        return run_test_case(
            self.test_case,
            body,
            self.slots,
            source=self.source_for(instance),
            out_dir=self.out_dir,
        )


def data_driven(
    source: Optional[DataSource] = None,
    *,
    slots: Optional[Sequence[ParameterSlot]] = None,
    test_case: Optional[str] = None,
    fixed: Optional[Dict[str, Any]] = None,
    out_dir: Optional[str] = None,
):
    """Decorator turning a parameterized function into a row-driven test case."""

    def _decorator(func: Callable):
        parameters = list(inspect.signature(func).parameters.values())
        is_method = bool(parameters) and parameters[0].name == "self"
        if is_method:
            parameters = parameters[1:]

        if slots is not None:
            declared = list(slots)
        else:
            declared = _slots_from_signature(parameters, fixed or {}, _type_hints(func))
        if slots is not None and len(declared) != len(parameters):
            raise ConfigurationError(
                f"{func.__name__} takes {len(parameters)} parameter(s) but {len(declared)} slot(s) were declared"
            )
        bound = [replace(slot, position=i) for i, slot in enumerate(declared)]

        spec = TestCaseSpec(
            test_case=test_case or func.__name__,
            func=func,
            slots=bound,
            source=source,
            is_method=is_method,
            out_dir=out_dir,
        )
        _REGISTRY.append(spec)

        if is_method:
            @functools.wraps(func)
            def wrapper(self):
                spec.run(self)

            wrapper.__signature__ = inspect.Signature(
                [inspect.Parameter("self", inspect.Parameter.POSITIONAL_OR_KEYWORD)]
            )
        else:
            @functools.wraps(func)
            def wrapper():
                spec.run()

            wrapper.__signature__ = inspect.Signature()

        wrapper.rowdriven = spec
        return wrapper

    return _decorator


def test_data(source: DataSource):
    """Class decorator: default data source for the class's data-driven methods.

    A method's own source takes precedence.
    """

    def _decorator(cls):
        setattr(cls, SOURCE_ATTR, source)
        return cls

    return _decorator


test_data.__test__ = False


def registered() -> List[Dict[str, Any]]:
    """List all declared data-driven test cases."""
    return [
        {
            "test_case": spec.test_case,
            "function": spec.func.__qualname__,
            "slots": [(slot.name, slot.kind.value) for slot in spec.slots],
            "sources": list(spec.source.paths) if spec.source else [],
        }
        for spec in _REGISTRY
    ]
