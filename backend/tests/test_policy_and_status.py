from __future__ import annotations

import unittest

from motelmap.constants import ListingStatus, Role
from motelmap.models import Listing
from motelmap.services.policy import Caller, can_mutate, is_admin, require_admin, require_mutation, resolve_caller
from motelmap.services.status import INITIAL_STATUS, apply_transition, can_transition
from motelmap.utils.exceptions import AuthenticationError, AuthorizationError


class AccessPolicyTestCase(unittest.TestCase):
    def setUp(self):
        self.listing = Listing(id="listing-1", owner_id="user_owner", status=ListingStatus.PENDING)

    def test_owner_can_mutate_with_any_role(self):
        for role in Role:
            self.assertTrue(can_mutate(Caller(subject="user_owner", role=role), self.listing))

    def test_admin_can_mutate_any_listing(self):
        self.assertTrue(can_mutate(Caller(subject="user_admin", role=Role.ADMIN), self.listing))

    def test_other_callers_cannot_mutate(self):
        for role in (Role.OWNER, Role.USER):
            caller = Caller(subject="user_other", role=role)
            self.assertFalse(can_mutate(caller, self.listing))
            with self.assertRaises(AuthorizationError):
                require_mutation(caller, self.listing)

    def test_is_admin(self):
        self.assertTrue(is_admin(Caller(subject="a", role=Role.ADMIN)))
        self.assertFalse(is_admin(Caller(subject="a", role=Role.OWNER)))
        with self.assertRaises(AuthorizationError):
            require_admin(Caller(subject="a", role=Role.USER))

    def test_missing_identity_is_unauthenticated_not_unauthorized(self):
        with self.assertRaises(AuthenticationError) as ctx:
            resolve_caller(db=None, identity=None)
        self.assertNotIsInstance(ctx.exception, AuthorizationError)

    def test_missing_role_reads_as_user(self):
        self.assertIs(Role.from_stored(None), Role.USER)
        self.assertIs(Role.from_stored(Role.OWNER), Role.OWNER)


class StatusMachineTestCase(unittest.TestCase):
    def test_initial_status_is_pending(self):
        self.assertIs(INITIAL_STATUS, ListingStatus.PENDING)

    def test_every_transition_is_allowed(self):
        for current in ListingStatus:
            for target in ListingStatus:
                self.assertTrue(can_transition(current, target))

    def test_transition_sequence(self):
        listing = Listing(id="listing-1", owner_id="user_owner", status=ListingStatus.PENDING)
        seen = []
        for target in (ListingStatus.APPROVED, ListingStatus.PAUSED, ListingStatus.APPROVED, ListingStatus.PENDING):
            previous = apply_transition(listing, target)
            seen.append((previous, listing.status))
        self.assertEqual(seen, [
            (ListingStatus.PENDING, ListingStatus.APPROVED),
            (ListingStatus.APPROVED, ListingStatus.PAUSED),
            (ListingStatus.PAUSED, ListingStatus.APPROVED),
            (ListingStatus.APPROVED, ListingStatus.PENDING),
        ])


if __name__ == "__main__":
    unittest.main()
