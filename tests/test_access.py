from uuid import uuid4

import pytest

from familytree.core.errors import Denied, InvalidArgument, NotFound
from familytree.models.tree import FamilyTree
from familytree.models.user import User
from familytree.schemas.tree import TreeCreate
from familytree.services.access import Requester, authorize
from familytree.services.guest_service import claim
from familytree.services.store import insert
from familytree.services.tree_service import create_tree


@pytest.fixture
def owner(db):
    return insert(db, User(subject="owner-subject", tree_ids=[]), "create user")


def test_owner_is_granted(db, owner):
    tree, _ = create_tree(db, Requester(user_id=owner.id), TreeCreate(name="Mine"))
    assert authorize(db, tree.id, Requester(user_id=owner.id)).id == tree.id
    assert authorize(db, tree.id, Requester(user_id=owner.id), write_required=True).id == tree.id


def test_other_user_is_denied(db, owner):
    tree, _ = create_tree(db, Requester(user_id=owner.id), TreeCreate(name="Mine"))
    with pytest.raises(Denied):
        authorize(db, tree.id, Requester(user_id=str(uuid4())))


def test_guest_is_granted_only_while_unclaimed(db, tree, owner):
    guest = Requester(guest_session_id="guest-token")
    assert authorize(db, tree.id, guest).id == tree.id
    with pytest.raises(Denied):
        authorize(db, tree.id, Requester(guest_session_id="another-token"))

    claim(db, guest_session_id="guest-token", user=owner)
    with pytest.raises(Denied):
        authorize(db, tree.id, guest)
    assert authorize(db, tree.id, Requester(user_id=owner.id)).id == tree.id


def test_missing_or_malformed_tree_is_not_found(db):
    with pytest.raises(NotFound):
        authorize(db, str(uuid4()), Requester(user_id="x"))
    with pytest.raises(NotFound):
        authorize(db, "not-a-tree-id", Requester(user_id="x"))


def test_owner_and_guest_together_are_rejected(db, owner):
    with pytest.raises(InvalidArgument):
        insert(db, FamilyTree(name="Both", owner_id=owner.id, guest_session_id="g", member_ids=[]), "create tree")


def test_tree_without_owner_or_guest_is_rejected(db):
    with pytest.raises(InvalidArgument):
        insert(db, FamilyTree(name="Nobody", member_ids=[]), "create tree")
