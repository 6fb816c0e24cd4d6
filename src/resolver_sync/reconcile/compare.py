"""Structural signature comparison across the contract and implementation packages."""

from __future__ import annotations

from collections.abc import Sequence

from resolver_sync.golang import Field, MethodSignature, types_equal


def fields_equal(
    impl_fields: Sequence[Field] | None,
    contract_fields: Sequence[Field] | None,
    projected: frozenset[str],
) -> bool:
    """Compare two field lists by length and position-wise type; names are ignored.

    An absent list and an empty list are equal.
    """
    left = tuple(impl_fields or ())
    right = tuple(contract_fields or ())
    if len(left) != len(right):
        return False
    return all(
        types_equal(impl_field.type, contract_field.type, projected)
        for impl_field, contract_field in zip(left, right, strict=True)
    )


def is_structurally_equal(
    impl_signature: MethodSignature,
    contract_signature: MethodSignature,
    projected: frozenset[str],
) -> bool:
    """Return True when parameters and results match under namespace projection."""
    return fields_equal(
        impl_signature.params, contract_signature.params, projected
    ) and fields_equal(impl_signature.results, contract_signature.results, projected)
