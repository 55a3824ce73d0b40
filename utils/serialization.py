from bson import ObjectId

# Never leave the server
USER_PRIVATE_FIELDS = ("password_hash", "reset_token", "reset_token_expiry")


def parse_mongo_data(data):
    """Recursively stringify ObjectIds so documents are JSON-safe."""
    if isinstance(data, list):
        return [parse_mongo_data(item) for item in data]
    if isinstance(data, dict):
        return {k: (str(v) if isinstance(v, ObjectId) else parse_mongo_data(v)) for k, v in data.items()}
    return data


def public_user(user_doc: dict) -> dict:
    """Strip credentials and mongo internals from a user document."""
    return parse_mongo_data({
        k: v for k, v in user_doc.items()
        if k not in USER_PRIVATE_FIELDS and k != "_id"
    })
