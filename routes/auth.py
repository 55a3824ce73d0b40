from fastapi import APIRouter, Body, HTTPException, Depends
from datetime import datetime, timedelta
import secrets
from database import users_collection
from models.user import UserModel, RegisterModel, LoginModel, ResetPasswordModel
from routes.deps import create_access_token, get_current_user, hash_password, insert_user_document, verify_password
from utils.serialization import public_user
from logging_config import get_logger
from constants import Roles
from config import config

router = APIRouter(prefix="/api/auth", tags=["Authentication"])
logger = get_logger("auth")


def _session_payload(user: UserModel) -> dict:
    access_token = create_access_token(data={"sub": user.id, "role": user.role})
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "role": user.role,
            "department_id": user.department_id,
        }
    }


@router.post("/register", status_code=201)
async def register(data: RegisterModel = Body(...)):
    """Self-service signup. Always creates an employee."""
    if await users_collection.find_one({"email": data.email}):
        logger.warning("Registration rejected: email already in use", extra={"data": {"email": data.email}})
        raise HTTPException(status_code=400, detail="User already exists")

    user = UserModel(
        name=data.name,
        email=data.email,
        password_hash=hash_password(data.password),
        department_id=data.department,
        role=Roles.EMPLOYEE,
    )
    await insert_user_document(users_collection, user.model_dump(by_alias=True))

    logger.info("User registered", extra={"data": {"user_id": user.id, "email": user.email}})
    return _session_payload(user)


@router.post("/login")
async def login(data: LoginModel = Body(...)):
    user_doc = await users_collection.find_one({"email": data.email})
    if not user_doc or not verify_password(data.password, user_doc.get("password_hash")):
        logger.warning("Login failed: invalid credentials", extra={"data": {"email": data.email}})
        raise HTTPException(status_code=400, detail="Invalid credentials")

    user = UserModel(**user_doc)
    logger.info("Login successful", extra={"data": {"user_id": user.id, "role": user.role}})
    return _session_payload(user)


@router.get("/me")
async def me(current_user: UserModel = Depends(get_current_user)):
    return public_user(current_user.model_dump(by_alias=True))


@router.post("/forgot-password")
async def forgot_password(payload: dict = Body(...)):
    email = payload.get("email")
    if not email:
        raise HTTPException(status_code=400, detail="Email is required")

    user_doc = await users_collection.find_one({"email": email})
    if not user_doc:
        raise HTTPException(status_code=404, detail="User not found")

    reset_token = secrets.token_hex(32)
    expiry = datetime.now() + timedelta(minutes=config.PASSWORD_RESET_EXPIRE_MINUTES)
    await users_collection.update_one(
        {"id": user_doc["id"]},
        {"$set": {"reset_token": reset_token, "reset_token_expiry": expiry}}
    )
    logger.info("Password reset requested", extra={"data": {"user_id": user_doc["id"]}})

    response = {"message": "Password reset email sent"}
    # No mail transport yet: hand the token back outside production
    if config.ENV != "production":
        response["resetToken"] = reset_token
    return response


@router.post("/reset-password")
async def reset_password(data: ResetPasswordModel = Body(...)):
    if data.password != data.confirm_password:
        raise HTTPException(status_code=400, detail="Passwords do not match")

    user_doc = await users_collection.find_one({
        "reset_token": data.token,
        "reset_token_expiry": {"$gt": datetime.now()}
    })
    if not user_doc:
        logger.warning("Password reset with invalid or expired token")
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")

    await users_collection.update_one(
        {"id": user_doc["id"]},
        {
            "$set": {"password_hash": hash_password(data.password), "updated_at": datetime.now()},
            "$unset": {"reset_token": "", "reset_token_expiry": ""}
        }
    )
    logger.info("Password reset completed", extra={"data": {"user_id": user_doc["id"]}})
    return {"message": "Password reset successful"}
