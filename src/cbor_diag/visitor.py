"""Depth-first traversal that lets rewrite rules replace matching nodes.

A rewrite rule is called for each matching node in pre-order.  It returns
None to keep the node, or the item that takes the node's place in its
parent.  Traversal continues into the children of whatever item ends up
in that place.  Raising an exception from the rule aborts the traversal;
nodes rewritten before that point stay rewritten.
"""

from typing import Callable, Optional

from .items import ApplicationLiteral, Array, Item, Map, Tag

TagRule = Callable[[int, Tag], Optional[Item]]
LiteralRule = Callable[[ApplicationLiteral], Optional[Item]]
NodeRule = Callable[[Item], Optional[Item]]


def walk(item: Item, rule: NodeRule) -> Item:
    """Apply ``rule`` to ``item`` and, recursively, to everything below it.

    Returns the item that replaces ``item`` (``item`` itself if the rule
    kept it).  Containers are modified in place.
    """
    replacement = rule(item)
    if replacement is not None:
        item = replacement

    if isinstance(item, Array):
        for i, child in enumerate(item.items):
            item.items[i] = walk(child, rule)
    elif isinstance(item, Map):
        for i, (key, value) in enumerate(item.pairs):
            key = walk(key, rule)
            item.pairs[i] = (key, walk(value, rule))
    elif isinstance(item, Tag):
        item.item = walk(item.item, rule)
    return item


def visit_tag(item: Item, rule: TagRule) -> Item:
    """Offer every tag in the tree to ``rule(tag_number, tag)``."""

    def on_node(node: Item) -> Optional[Item]:
        if isinstance(node, Tag):
            return rule(node.tag, node)
        return None

    return walk(item, on_node)


def visit_application_literals(item: Item, rule: LiteralRule) -> Item:
    """Offer every application-oriented literal in the tree to ``rule``."""

    def on_node(node: Item) -> Optional[Item]:
        if isinstance(node, ApplicationLiteral):
            return rule(node)
        return None

    return walk(item, on_node)
