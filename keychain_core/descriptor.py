"""
keychain_core.descriptor
------------------------
A descriptor declares which keys a keychain holds. It is a nested mapping
whose leaves are algorithm specs:

    {
        "token":    {"sig": {"alg": "RS256", "modulusLength": 2048}},
        "id_token": {"sig": {"alg": "ES256"}},
    }

parse_descriptor() turns the raw mapping into LeafSpec / DescriptorNode
values up front, so the engine never has to guess whether a mapping is a
leaf or a container while it is traversing.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Tuple, Union

from .errors import InvalidDescriptorError


@dataclass(frozen=True)
class LeafSpec:
    alg: str
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DescriptorNode:
    children: Dict[str, Union["LeafSpec", "DescriptorNode"]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.children)


DescriptorEntry = Union[LeafSpec, DescriptorNode]


def parse_descriptor(descriptor: Mapping[str, Any], path: Tuple[str, ...] = ()) -> DescriptorNode:
    if not isinstance(descriptor, Mapping):
        key = path[-1] if path else "<root>"
        raise InvalidDescriptorError(key, descriptor, path)

    children: Dict[str, DescriptorEntry] = {}

    for key, value in descriptor.items():
        child_path = path + (key,)

        if isinstance(value, Mapping) and "alg" in value:
            alg = value["alg"]
            if not isinstance(alg, str) or not alg:
                raise InvalidDescriptorError(key, value, child_path)
            children[key] = LeafSpec(alg=alg, params=dict(value))

        elif isinstance(value, Mapping):
            children[key] = parse_descriptor(value, child_path)

        else:
            raise InvalidDescriptorError(key, value, child_path)

    return DescriptorNode(children=children)


def iter_leaves(node: DescriptorNode, path: Tuple[str, ...] = ()) -> Iterator[Tuple[Tuple[str, ...], LeafSpec]]:
    for key, child in node.children.items():
        if isinstance(child, LeafSpec):
            yield path + (key,), child
        else:
            yield from iter_leaves(child, path + (key,))
