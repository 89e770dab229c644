"""
Resource descriptor helpers shared by the module builders.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, List, Optional, Sequence, Union

from eks_infra.iac_types import Ref, ResourceDescriptor, Tags


def iter_refs(value: Any) -> Iterator[Ref]:
    """Yield every Ref nested inside attribute values."""
    if isinstance(value, Ref):
        yield value
    elif isinstance(value, dict):
        for item in value.values():
            yield from iter_refs(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from iter_refs(item)


def describe(
    kind: str, logical_id: str, tags: Optional[Tags] = None, **attributes: Any
) -> ResourceDescriptor:
    """Build a descriptor whose dependencies are the targets of its Refs."""
    depends_on: List[str] = []
    for ref in iter_refs(attributes):
        if ref.target not in depends_on:
            depends_on.append(ref.target)
    return ResourceDescriptor(
        kind=kind,
        logical_id=logical_id,
        attributes=attributes,
        tags=tags,
        depends_on=tuple(depends_on),
    )


def ref_key(value: Union[Ref, str]) -> str:
    """Return the logical id a Ref points at, or the value itself."""
    return value.target if isinstance(value, Ref) else value


def ids_of(descriptors: Iterable[ResourceDescriptor]) -> List[Ref]:
    return [Ref(d.logical_id) for d in descriptors]


def ensure_unique_ids(descriptors: Sequence[ResourceDescriptor]) -> None:
    seen = set()
    for d in descriptors:
        if d.logical_id in seen:
            raise ValueError(f"Duplicate resource id in plan: {d.logical_id}")
        seen.add(d.logical_id)
