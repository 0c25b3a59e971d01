"""Registries for quality indicators and fitness evaluators.

Instead of hardcoding which indicator or fitness scheme to use, factories are
registered under a name and looked up at setup time. Lookups accept any
unambiguous prefix of a registered name, so ``"hyper"`` resolves to
``"hypervolume"`` and ``"inv"`` to ``"inverted"``.

There are two independent registries:
1. **IndicatorRegistry**: factories building Indicator instances
2. **FitnessRegistry**: factories building IndicatorFitnessEvaluator instances

Basic usage:
    ```python
    from ibex.registry import FitnessRegistry, IndicatorRegistry

    evaluator = FitnessRegistry.get("epsilon", kappa=0.05)
    igd = IndicatorRegistry.get("inv", reference_set=front)
    ```
"""

from collections.abc import Callable, Iterable
from typing import Any

from ibex.exceptions import ConfigurationError
from ibex.fitness import (
    AdditiveEpsilonIndicatorFitnessEvaluator,
    HypervolumeFitnessEvaluator,
    IndicatorFitnessEvaluator,
)
from ibex.indicators import (
    AdditiveEpsilonIndicator,
    ApproximationSet,
    GenerationalDistance,
    Hypervolume,
    InvertedGenerationalDistance,
    MaximumParetoFrontError,
    Spacing,
)
from ibex.protocols import Indicator


def _complete(name: str, available: Iterable[str], kind: str) -> str:
    """Resolve ``name`` to a registered name (exact match or unique prefix)."""
    names = sorted(available)
    if name in names:
        return name
    matches = [candidate for candidate in names if candidate.startswith(name)] if name else []
    if len(matches) == 1:
        return matches[0]
    listing = ", ".join(names) or "none"
    if matches:
        raise ConfigurationError(f"ambiguous {kind} '{name}' matches {', '.join(matches)}")
    raise ConfigurationError(f"unsupported {kind} '{name}'. Available: {listing}")


class IndicatorRegistry:
    """Registry for quality indicator factories.

    Class Attributes:
        _registry: Maps indicator names to factories accepting keyword
            arguments (typically ``reference_set``).
        _needs_reference: Names whose factories require a reference set.

    Example:
        ```python
        IndicatorRegistry.register("spacing", lambda **kw: Spacing(), needs_reference_set=False)
        spacing = IndicatorRegistry.get("spac")
        ```
    """

    _registry: dict[str, Callable[..., Indicator]] = {}
    _needs_reference: set[str] = set()

    @classmethod
    def register(cls, name: str, factory: Callable[..., Indicator], needs_reference_set: bool = True) -> None:
        """Register an indicator factory, overwriting any previous one."""
        cls._registry[name] = factory
        if needs_reference_set:
            cls._needs_reference.add(name)
        else:
            cls._needs_reference.discard(name)

    @classmethod
    def resolve(cls, name: str) -> str:
        """Return the full registered name for ``name``.

        Raises:
            ConfigurationError: If the name is unknown or an ambiguous prefix.
        """
        return _complete(name, cls._registry.keys(), "indicator")

    @classmethod
    def needs_reference_set(cls, name: str) -> bool:
        return cls.resolve(name) in cls._needs_reference

    @classmethod
    def get(cls, name: str, **kwargs: Any) -> Indicator:
        """Build a configured indicator by (possibly abbreviated) name.

        Raises:
            ConfigurationError: If the name cannot be resolved, or the
                indicator needs a reference set and none was passed.
        """
        resolved = cls.resolve(name)
        if resolved in cls._needs_reference and kwargs.get("reference_set") is None:
            raise ConfigurationError(f"no reference set available for indicator '{resolved}'")
        return cls._registry[resolved](**kwargs)

    @classmethod
    def list(cls) -> list[str]:
        return sorted(cls._registry.keys())


class FitnessRegistry:
    """Registry for IBEA fitness evaluator factories.

    Example:
        ```python
        evaluator = FitnessRegistry.get("hypervolume", kappa=0.05, rho=2.0)
        evaluator.larger_values_preferred  # True
        ```
    """

    _registry: dict[str, Callable[..., IndicatorFitnessEvaluator]] = {}

    @classmethod
    def register(cls, name: str, factory: Callable[..., IndicatorFitnessEvaluator]) -> None:
        """Register a fitness evaluator factory, overwriting any previous one."""
        cls._registry[name] = factory

    @classmethod
    def get(cls, name: str, **kwargs: Any) -> IndicatorFitnessEvaluator:
        """Build a configured fitness evaluator by (possibly abbreviated) name.

        Raises:
            ConfigurationError: If the name cannot be resolved.
        """
        return cls._registry[_complete(name, cls._registry.keys(), "fitness indicator")](**kwargs)

    @classmethod
    def list(cls) -> list[str]:
        return sorted(cls._registry.keys())


def compute_indicators(
    approximation_set: ApproximationSet,
    names: Iterable[str],
    reference_set: ApproximationSet | None = None,
) -> dict[str, float]:
    """Evaluate several indicators on one approximation set.

    All names are resolved, and the reference set requirement checked, before
    any indicator is computed.

    Args:
        approximation_set: Population or objective matrix to assess.
        names: Indicator names or unambiguous prefixes.
        reference_set: Reference front, required by every indicator except
            spacing.

    Returns:
        Mapping from the names as given to indicator values.

    Raises:
        ConfigurationError: For unknown names or a missing reference set.

    Example:
        >>> front = np.array([[0.0, 1.0], [1.0, 0.0]])
        >>> compute_indicators(front, ["eps", "spacing"], reference_set=front)
        {'eps': 0.0, 'spacing': 0.0}
    """
    names = list(names)
    resolved = {name: IndicatorRegistry.resolve(name) for name in names}
    missing = [full for full in resolved.values() if full in IndicatorRegistry._needs_reference]
    if missing and reference_set is None:
        raise ConfigurationError(f"no reference set available for indicator(s) {', '.join(sorted(set(missing)))}")

    results: dict[str, float] = {}
    for name, full in resolved.items():
        kwargs = {"reference_set": reference_set} if full in IndicatorRegistry._needs_reference else {}
        results[name] = IndicatorRegistry.get(full, **kwargs).evaluate(approximation_set)
    return results


def list_indicators() -> list[str]:
    """List all registered indicator names."""
    return IndicatorRegistry.list()


def list_fitness_indicators() -> list[str]:
    """List all registered fitness evaluator names."""
    return FitnessRegistry.list()


IndicatorRegistry.register("hypervolume", lambda reference_set=None, **kw: Hypervolume(reference_set, **kw))
IndicatorRegistry.register("generational", lambda reference_set=None, **kw: GenerationalDistance(reference_set, **kw))
IndicatorRegistry.register(
    "inverted", lambda reference_set=None, **kw: InvertedGenerationalDistance(reference_set, **kw)
)
IndicatorRegistry.register("epsilon", lambda reference_set=None, **kw: AdditiveEpsilonIndicator(reference_set, **kw))
IndicatorRegistry.register("error", lambda reference_set=None, **kw: MaximumParetoFrontError(reference_set, **kw))
IndicatorRegistry.register("spacing", lambda **kw: Spacing(), needs_reference_set=False)

FitnessRegistry.register("epsilon", AdditiveEpsilonIndicatorFitnessEvaluator)
FitnessRegistry.register("hypervolume", HypervolumeFitnessEvaluator)
