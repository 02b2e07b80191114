# athletehub/routes/auth.py
from datetime import timedelta
import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException
from pymongo.errors import DuplicateKeyError

from athletehub import db
from athletehub.auth import (
    authenticate_user,
    get_current_user,
    get_password_hash,
    hash_token,
    issue_session,
    new_verification_token,
    verify_password,
)
from athletehub.schemas.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateMeRequest,
)
from athletehub.settings import RESET_TOKEN_TTL_MIN, VERIFICATION_TOKEN_TTL_HOURS
from athletehub.utils.email import send_password_reset_email, send_verification_email
from athletehub.utils.logger import log_activity
from athletehub.utils.responses import success
from athletehub.utils.serialize import as_utc, public_user, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


# ---------- Register ----------
@router.post("/register", status_code=201)
def register(body: RegisterRequest):
    users = db.users()
    if users.find_one({"email": body.email}):
        raise HTTPException(status_code=400, detail="User with this email already exists")

    now = utcnow()
    token = new_verification_token()
    doc = {
        "first_name": body.first_name.strip(),
        "last_name": body.last_name.strip(),
        "email": body.email,
        "password": get_password_hash(body.password),
        "phone": body.phone,
        "role": body.role.value,
        "preferred_language": body.preferred_language,
        "is_verified": False,
        "is_active": True,
        "refresh_token": None,
        "verification_token": token,
        "verification_token_expiry": now + timedelta(hours=VERIFICATION_TOKEN_TTL_HOURS),
        "created_at": now,
        "updated_at": now,
    }
    try:
        users.insert_one(doc)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="User with this email already exists")

    try:
        send_verification_email(body.email, token)
    except Exception:
        logger.exception("verification email to %s failed", body.email)

    log_activity(user_id=str(doc["_id"]), action="register", metadata={"role": doc["role"]})
    return success("User registered successfully. Please verify your email.", user=public_user(doc))


# ---------- Verify email ----------
@router.post("/verify-email/{token}")
def verify_email(token: str):
    users = db.users()
    user = users.find_one({"verification_token": token})
    expiry = as_utc(user.get("verification_token_expiry")) if user else None
    if not user or expiry is None or expiry <= utcnow():
        raise HTTPException(status_code=400, detail="Invalid or expired verification token")

    users.update_one(
        {"_id": user["_id"]},
        {
            "$set": {"is_verified": True, "updated_at": utcnow()},
            "$unset": {"verification_token": "", "verification_token_expiry": ""},
        },
    )
    log_activity(user_id=str(user["_id"]), action="verify_email")
    return success("Email verified successfully")


# ---------- Login ----------
@router.post("/login")
def login(body: LoginRequest):
    user = authenticate_user(body.email, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not user.get("is_verified"):
        raise HTTPException(status_code=401, detail="Please verify your email before logging in")
    if not user.get("is_active", True):
        raise HTTPException(status_code=401, detail="Your account has been deactivated. Please contact support.")

    session = issue_session(user)
    db.users().update_one({"_id": user["_id"]}, {"$set": {"last_login": utcnow()}})

    log_activity(user_id=str(user["_id"]), action="login")
    return success("Login successful", user=public_user(user), **session)


# ---------- Refresh ----------
@router.post("/refresh-token")
def refresh_token(body: RefreshRequest):
    if not body.refresh_token:
        raise HTTPException(status_code=400, detail="Refresh token is required")

    user = db.users().find_one({"refresh_token": body.refresh_token})
    if not user or not user.get("is_active", True):
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    session = issue_session(user, previous_refresh=body.refresh_token)
    return success(**session)


# ---------- Logout ----------
@router.post("/logout")
def logout(user: dict = Depends(get_current_user)):
    db.users().update_one({"_id": user["_id"]}, {"$set": {"refresh_token": None, "updated_at": utcnow()}})
    log_activity(user_id=str(user["_id"]), action="logout")
    return success("Logged out successfully")


# ---------- Forgot / reset password ----------
@router.post("/forgot-password")
def forgot_password(body: ForgotPasswordRequest):
    users = db.users()
    user = users.find_one({"email": body.email})
    if not user:
        raise HTTPException(status_code=404, detail="No user found with this email")

    token = secrets.token_hex(32)
    users.update_one(
        {"_id": user["_id"]},
        {"$set": {
            "reset_password_token": hash_token(token),
            "reset_password_expiry": utcnow() + timedelta(minutes=RESET_TOKEN_TTL_MIN),
        }},
    )
    send_password_reset_email(body.email, token)
    log_activity(user_id=str(user["_id"]), action="forgot_password")
    return success("Password reset link sent to email")


@router.post("/reset-password")
def reset_password(body: ResetPasswordRequest):
    users = db.users()
    user = users.find_one({"reset_password_token": hash_token(body.token)})
    expiry = as_utc(user.get("reset_password_expiry")) if user else None
    if not user or expiry is None or expiry <= utcnow():
        raise HTTPException(status_code=400, detail="Invalid or expired token")

    users.update_one(
        {"_id": user["_id"]},
        {
            "$set": {"password": get_password_hash(body.password), "updated_at": utcnow()},
            "$unset": {"reset_password_token": "", "reset_password_expiry": ""},
        },
    )
    log_activity(user_id=str(user["_id"]), action="reset_password")
    return success("Password reset successful")


# ---------- Current user ----------
@router.get("/me")
def me(user: dict = Depends(get_current_user)):
    return success(user=public_user(user))


@router.put("/me")
def update_me(body: UpdateMeRequest, user: dict = Depends(get_current_user)):
    changes = body.changes()
    changes["updated_at"] = utcnow()
    db.users().update_one({"_id": user["_id"]}, {"$set": changes})
    updated = db.users().find_one({"_id": user["_id"]})
    return success("User updated successfully", user=public_user(updated))


@router.put("/change-password")
def change_password(body: ChangePasswordRequest, user: dict = Depends(get_current_user)):
    if not verify_password(body.current_password, user["password"]):
        raise HTTPException(status_code=401, detail="Current password is incorrect")

    db.users().update_one(
        {"_id": user["_id"]},
        {"$set": {"password": get_password_hash(body.new_password), "updated_at": utcnow()}},
    )
    log_activity(user_id=str(user["_id"]), action="change_password")
    return success("Password changed successfully")
