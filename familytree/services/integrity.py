"""Checks a tree's members against the relationship-graph invariants.

Used by the integrity endpoint and by the tests; it only reads.
"""
from collections import Counter

from sqlalchemy.orm import Session

from ..models.member import FamilyMember
from ..models.tree import FamilyTree
from . import store


def find_problems(tree: FamilyTree, members: list[FamilyMember]) -> list[str]:
    problems: list[str] = []
    by_id = {m.id: m for m in members}
    listed = list(tree.member_ids or [])

    for mid, n in Counter(listed).items():
        if n > 1:
            problems.append(f"tree lists member {mid} {n} times")
    for mid in listed:
        if mid not in by_id:
            problems.append(f"tree lists missing member {mid}")
    for m in members:
        if m.id not in listed:
            problems.append(f"member {m.id} is not in the tree's member list")

    for m in members:
        # self references
        if m.id in (m.mother, m.father):
            problems.append(f"member {m.id} is its own parent")
        if m.mother and m.mother == m.father:
            problems.append(f"member {m.id} has the same mother and father")
        if m.id in m.children:
            problems.append(f"member {m.id} is its own child")
        if m.id in m.spouse_ids:
            problems.append(f"member {m.id} is its own spouse")
        if len(set(m.children)) != len(m.children):
            problems.append(f"member {m.id} has duplicate children")
        if len(set(m.spouse_ids)) != len(m.spouse_ids):
            problems.append(f"member {m.id} has duplicate spouses")

        # parent -> child
        for child_id in m.children:
            child = by_id.get(child_id)
            if not child:
                problems.append(f"member {m.id} lists missing child {child_id}")
            elif m.id not in (child.mother, child.father):
                problems.append(f"member {m.id} lists child {child_id} whose parents do not include it")
        # child -> parent
        for slot in store.PARENT_SLOTS:
            parent_id = getattr(m, slot)
            if not parent_id:
                continue
            parent = by_id.get(parent_id)
            if not parent:
                problems.append(f"member {m.id} has missing {slot} {parent_id}")
            elif m.id not in parent.children:
                problems.append(f"member {m.id} has {slot} {parent_id} that does not list it as a child")
        # spouse symmetry
        for spouse_id in m.spouse_ids:
            spouse = by_id.get(spouse_id)
            if not spouse:
                problems.append(f"member {m.id} lists missing spouse {spouse_id}")
            elif m.id not in spouse.spouse_ids:
                problems.append(f"member {m.id} lists spouse {spouse_id} who does not list it back")

    if tree.owner_id and tree.guest_session_id:
        problems.append("tree has both an owner and a guest session")
    if not tree.owner_id and not tree.guest_session_id:
        problems.append("tree has neither an owner nor a guest session")
    return problems


def check_tree(db: Session, tree: FamilyTree) -> list[str]:
    return find_problems(tree, store.list_members(db, tree.id))
