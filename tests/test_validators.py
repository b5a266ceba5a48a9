from deskcrm.validators import (
    normalize_advertisement_enquiry,
    validate_advertisement_enquiry,
    validate_enquiry,
    validate_user,
)


def test_valid_enquiry(make_enquiry):
    assert validate_enquiry(make_enquiry()).is_valid


def test_enquiry_required_fields():
    result = validate_enquiry({})
    assert not result.is_valid
    assert result.errors == [
        "Full name is required",
        "Mobile number is required",
        "Please select a state",
        "Status is required",
    ]


def test_enquiry_formats(make_enquiry):
    result = validate_enquiry(
        make_enquiry(mobile="98765", alternateMobile="12", email="nope", aadharNumber="123", panNumber="abc")
    )
    assert result.errors == [
        "Mobile number must be 10 digits",
        "Alternate mobile number must be 10 digits",
        "Invalid email address",
        "Invalid Aadhar number (must be 12 digits)",
        "Invalid PAN number (format: ABCDE1234F)",
    ]


def test_enquiry_email_is_optional(make_enquiry):
    assert validate_enquiry(make_enquiry(email="")).is_valid


def test_normalize_advertisement_row():
    row = normalize_advertisement_enquiry(
        {"name": "  Asha ", "phoneNo": "+91 91234 56789", "email": " a@x.in ", "aadharNo": "1234 5678 9012", "panNo": "abcde1234f"}
    )
    assert row == {
        "name": "Asha",
        "phoneNo": "9123456789",
        "email": "a@x.in",
        "aadharNo": "123456789012",
        "panNo": "ABCDE1234F",
    }


def test_advertisement_phone_must_start_with_6_to_9():
    result = validate_advertisement_enquiry({"name": "Asha", "phoneNo": "5123456789", "email": "a@x.in"})
    assert result.errors == ["Invalid phone number (must be 10 digits starting with 6-9)"]


def test_advertisement_required_fields():
    result = validate_advertisement_enquiry({"name": "A"})
    assert result.errors == [
        "Name must be at least 2 characters",
        "Phone number is required",
        "Email is required",
    ]


def test_user_username_rules():
    users = [{"id": "user-1", "username": "asha", "isActive": False}]

    assert validate_user({"username": "as", "password": "secret1", "fullName": "A"}).errors == [
        "Username must be at least 3 characters"
    ]
    assert validate_user({"username": "as ha", "password": "secret1", "fullName": "A"}).errors == [
        "Username can only contain letters, numbers, and underscores"
    ]
    # inactive accounts keep their username
    assert validate_user({"username": "asha", "password": "secret1", "fullName": "A"}, users).errors == [
        "Username already exists"
    ]


def test_user_edit_may_keep_own_username_and_password():
    users = [{"id": "user-1", "username": "asha"}]
    result = validate_user({"username": "asha", "password": "", "fullName": "Asha"}, users, is_edit=True, exclude_id="user-1")
    assert result.is_valid


def test_user_password_and_role():
    result = validate_user({"username": "asha", "password": "123", "fullName": "Asha", "role": "owner"})
    assert result.errors == ["Password must be at least 6 characters", "Role must be admin or user"]
