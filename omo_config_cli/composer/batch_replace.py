"""Batch model replacement across every agent and category binding.

The replacement is planned against a snapshot of the bindings and returned
as a set of updates; the caller commits them together, so a rejected
request never leaves a binding half rewritten.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from collections.abc import Mapping

from ..catalog import is_separator_key
from ..errors import BatchReplaceError
from ..errors import VariantError
from ..model_catalog import ModelCatalog
from .models import BatchReplaceOutcome
from .models import BatchReplaceResult
from .models import BatchReplaceSpec
from .models import Binding
from .models import EntryRef

logger = logging.getLogger(__name__)


def validate_spec(spec: BatchReplaceSpec, catalog: ModelCatalog) -> None:
    """Reject malformed requests before any binding is looked at.

    Raises:
        BatchReplaceError: If a model is missing or both models are equal
        VariantError: If a variant is not offered by its model
    """
    if not spec.from_model or not spec.to_model:
        raise BatchReplaceError("Both a source and a target model are required")
    if spec.from_model == spec.to_model:
        raise BatchReplaceError(f"Source and target model are both '{spec.from_model}'")
    if spec.from_variant and not catalog.supports_variant(spec.from_model, spec.from_variant):
        raise VariantError(f"Model '{spec.from_model}' has no variant '{spec.from_variant}'")
    if spec.to_variant and not catalog.supports_variant(spec.to_model, spec.to_variant):
        raise VariantError(f"Model '{spec.to_model}' has no variant '{spec.to_variant}'")


def plan_batch_replace(
    bindings: Mapping[EntryRef, Binding],
    refs: Iterable[EntryRef],
    spec: BatchReplaceSpec,
    catalog: ModelCatalog,
) -> tuple[BatchReplaceResult, dict[EntryRef, Binding]]:
    """Compute the rewrite without touching ``bindings``.

    Args:
        bindings: Current binding per (dimension, key)
        refs: Keys to scan, in order (built-in then custom, per dimension)
        spec: Requested replacement
        catalog: Model variants used for validation and variant clearing

    Returns:
        Tuple of (result, new binding per rewritten key)
    """
    validate_spec(spec, catalog)

    target_variants = catalog.variants(spec.to_model)
    updates: dict[EntryRef, Binding] = {}
    result = BatchReplaceResult(outcome=BatchReplaceOutcome.NO_MATCH)

    for ref in refs:
        if is_separator_key(ref[1]):
            continue
        current = bindings.get(ref)
        if current is None or current.model != spec.from_model:
            continue
        if spec.from_variant and current.variant != spec.from_variant:
            continue

        if spec.to_variant:
            variant = spec.to_variant
        elif current.variant and current.variant not in target_variants:
            variant = None
            result.cleared_variants += 1
        else:
            variant = current.variant

        updates[ref] = Binding(model=spec.to_model, variant=variant)
        result.touched.append(ref)
        result.replaced += 1

    if result.replaced:
        result.outcome = BatchReplaceOutcome.REPLACED

    logger.debug(
        f"Batch replace {spec.from_model} -> {spec.to_model}: "
        f"{result.replaced} replaced, {result.cleared_variants} variants cleared"
    )
    return result, updates
