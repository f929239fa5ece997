import pytest

from errors import AuthorizationError
from guards import can_view, require_admin, require_owner, require_role, require_visible
from kinds import ACCOUNT, DONATION, REQUEST
from models import Account, Donation, Request as RequestModel, Role


def _account(account_id, role):
    return Account(id=account_id, name="n", email=f"{account_id}@example.com", password_hash="x", role=role)


def _request(owner_id, status):
    return RequestModel(
        id=10,
        school_id=owner_id,
        school_name="S",
        contact_person="P",
        contact_email="p@example.com",
        contact_phone="1",
        category="books",
        title="t",
        description="d",
        quantity="1",
        urgency="low",
        location="l",
        status=status,
    )


def test_require_role():
    donor = _account(1, "donor")
    require_role(donor, Role.DONOR)
    require_role(donor, Role.SCHOOL, Role.DONOR)
    with pytest.raises(AuthorizationError):
        require_role(donor, Role.SCHOOL)


def test_require_admin():
    require_admin(_account(1, "admin"))
    with pytest.raises(AuthorizationError, match="Admin access required"):
        require_admin(_account(2, "volunteer"))


def test_require_owner():
    school = _account(1, "school")
    require_owner(school, REQUEST, _request(1, "verified"))
    with pytest.raises(AuthorizationError):
        require_owner(_account(2, "school"), REQUEST, _request(1, "verified"))


def test_account_owns_itself():
    account = _account(5, "volunteer")
    require_owner(account, ACCOUNT, account)


@pytest.mark.parametrize(
    "caller,expected",
    [
        (None, False),
        (_account(2, "school"), False),
        (_account(1, "school"), True),
        (_account(3, "admin"), True),
    ],
)
def test_unverified_entities_are_hidden(caller, expected):
    assert can_view(caller, REQUEST, _request(1, "rejected")) is expected


def test_verified_entities_are_public():
    assert can_view(None, REQUEST, _request(1, "verified"))


def test_completed_donation_hidden_from_public():
    donation = Donation(
        id=3,
        donor_id=1,
        organization_name="o",
        contact_person="c",
        email="c@example.com",
        phone="1",
        donation_type="funds",
        purpose="p",
        description="d",
        estimated_amount="1",
        status="completed",
    )
    with pytest.raises(AuthorizationError, match="not yet verified"):
        require_visible(None, DONATION, donation)
    require_visible(_account(1, "donor"), DONATION, donation)
