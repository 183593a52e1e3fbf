"""
account_service package

Core backend logic for the user-account authentication service:

- FastAPI application factory (`main.py`)
- SQLAlchemy user model and database lifecycle (`models.py`, `db.py`)
- Password hashing, JWT and reset-token helpers (`auth.py`)
- Request validation pipeline (`validators.py`) and Pydantic schemas (`schemas.py`)
- Error taxonomy and the centralized error formatter (`exceptions.py`)
"""
