"""Ordering rules for the members listed inside a class box."""

from __future__ import annotations

from typing import Callable, Iterable, List, Tuple

from ..models import Member, Visibility
from .options import MemberOrder

SortKey = Callable[[Member], Tuple]

_PUBLIC_FIRST = {Visibility.PUBLIC: 0, Visibility.PROTECTED: 1, Visibility.PRIVATE: 2}
_PRIVATE_FIRST = {Visibility.PRIVATE: 0, Visibility.PROTECTED: 1, Visibility.PUBLIC: 2}


def _name_key(member: Member) -> str:
    return member.name.upper()


def member_sort_key(order: MemberOrder) -> SortKey:
    """Return the sort key for ``order``; protected members are always the middle tier."""
    if order is MemberOrder.PUBLIC_TO_PRIVATE:
        return lambda member: (_PUBLIC_FIRST[member.visibility], _name_key(member))
    if order is MemberOrder.PRIVATE_TO_PUBLIC:
        return lambda member: (_PRIVATE_FIRST[member.visibility], _name_key(member))
    return lambda member: (_name_key(member),)


def sort_members(members: Iterable[Member], order: MemberOrder) -> List[Member]:
    return sorted(members, key=member_sort_key(order))


__all__ = ["member_sort_key", "sort_members"]
