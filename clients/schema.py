"""
Database schema, portable across PostgreSQL and SQLite.

The SQLAlchemy mapping in auth/orm_models.py describes the same auth tables;
this DDL is the source of truth and is what the raw SQL fallback relies on
when the ORM layer is unavailable.

Conventions:
- ids are UUID strings (VARCHAR(36)), generated by the application
- timestamps are TIMESTAMP WITH TIME ZONE, always written in UTC
- JSON payloads are TEXT written with json.dumps
"""

import logging

from clients.database import SQLClient

logger = logging.getLogger(__name__)

_AUTH_TABLES = [
    """
    CREATE TABLE IF NOT EXISTS auth_users (
        id VARCHAR(36) PRIMARY KEY,
        email VARCHAR(255) NOT NULL UNIQUE,
        display_name VARCHAR(255) NOT NULL,
        password_hash VARCHAR(255) NOT NULL,
        role VARCHAR(20) NOT NULL DEFAULT 'user',
        is_active BOOLEAN NOT NULL DEFAULT TRUE,
        email_verified BOOLEAN NOT NULL DEFAULT FALSE,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL,
        last_login_at TIMESTAMP WITH TIME ZONE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS auth_sessions (
        id VARCHAR(36) PRIMARY KEY,
        user_id VARCHAR(36) NOT NULL REFERENCES auth_users(id) ON DELETE CASCADE,
        token_hash VARCHAR(64) NOT NULL UNIQUE,
        expires_at TIMESTAMP WITH TIME ZONE NOT NULL,
        is_active BOOLEAN NOT NULL DEFAULT TRUE,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL,
        ip_address VARCHAR(45),
        user_agent TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_auth_sessions_user_active ON auth_sessions (user_id, is_active)",
    """
    CREATE TABLE IF NOT EXISTS security_events (
        id VARCHAR(36) PRIMARY KEY,
        event_type VARCHAR(50) NOT NULL,
        email VARCHAR(255),
        user_id VARCHAR(36),
        ip_address VARCHAR(45),
        user_agent TEXT,
        details TEXT,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_security_events_created ON security_events (created_at)",
]

_CRM_TABLES = [
    """
    CREATE TABLE IF NOT EXISTS audit_log (
        id VARCHAR(36) PRIMARY KEY,
        user_id VARCHAR(36),
        entity_type VARCHAR(50) NOT NULL,
        entity_id VARCHAR(36) NOT NULL,
        action VARCHAR(20) NOT NULL,
        changes TEXT,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_audit_log_entity ON audit_log (entity_type, entity_id)",
    """
    CREATE TABLE IF NOT EXISTS contacts (
        id VARCHAR(36) PRIMARY KEY,
        first_name VARCHAR(255) NOT NULL,
        last_name VARCHAR(255) NOT NULL,
        title VARCHAR(255),
        associated_account VARCHAR(255),
        email_address VARCHAR(255),
        desk_phone VARCHAR(50),
        mobile_phone VARCHAR(50),
        city VARCHAR(100),
        state VARCHAR(100),
        country VARCHAR(100),
        time_zone VARCHAR(50),
        source VARCHAR(50),
        owner VARCHAR(255),
        status VARCHAR(50),
        created_by VARCHAR(36),
        updated_by VARCHAR(36),
        created_at TIMESTAMP WITH TIME ZONE NOT NULL,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL,
        deleted_at TIMESTAMP WITH TIME ZONE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS accounts (
        id VARCHAR(36) PRIMARY KEY,
        account_name VARCHAR(255) NOT NULL,
        account_rating VARCHAR(50),
        account_owner VARCHAR(255),
        status VARCHAR(50),
        industry VARCHAR(255),
        revenue VARCHAR(100),
        number_of_employees VARCHAR(50),
        address_line1 VARCHAR(255),
        address_line2 VARCHAR(255),
        city VARCHAR(100),
        state VARCHAR(100),
        country VARCHAR(100),
        zip_post_code VARCHAR(20),
        time_zone VARCHAR(50),
        board_number VARCHAR(50),
        website VARCHAR(255),
        geo VARCHAR(50),
        created_by VARCHAR(36),
        updated_by VARCHAR(36),
        created_at TIMESTAMP WITH TIME ZONE NOT NULL,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL,
        deleted_at TIMESTAMP WITH TIME ZONE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS deals (
        id VARCHAR(36) PRIMARY KEY,
        deal_name VARCHAR(255) NOT NULL,
        deal_owner VARCHAR(255),
        business_line VARCHAR(50),
        associated_account VARCHAR(255),
        associated_contact VARCHAR(255),
        closing_date DATE,
        probability VARCHAR(20),
        deal_value NUMERIC(14, 2),
        approved_by VARCHAR(255),
        description TEXT,
        next_step TEXT,
        geo VARCHAR(50),
        entity VARCHAR(50),
        stage VARCHAR(50),
        created_by VARCHAR(36),
        updated_by VARCHAR(36),
        created_at TIMESTAMP WITH TIME ZONE NOT NULL,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL,
        deleted_at TIMESTAMP WITH TIME ZONE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS activities (
        id VARCHAR(36) PRIMARY KEY,
        activity_type VARCHAR(50) NOT NULL,
        associated_contact VARCHAR(255),
        associated_account VARCHAR(255),
        date_time TIMESTAMP WITH TIME ZONE NOT NULL,
        follow_up_schedule VARCHAR(255),
        summary TEXT,
        outcome_disposition VARCHAR(50),
        created_by VARCHAR(36),
        updated_by VARCHAR(36),
        created_at TIMESTAMP WITH TIME ZONE NOT NULL,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL,
        deleted_at TIMESTAMP WITH TIME ZONE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS leads (
        id VARCHAR(36) PRIMARY KEY,
        first_name VARCHAR(255) NOT NULL,
        last_name VARCHAR(255) NOT NULL,
        company VARCHAR(255) NOT NULL,
        title VARCHAR(255),
        phone VARCHAR(50),
        email VARCHAR(255),
        lead_source VARCHAR(50),
        status VARCHAR(50),
        rating VARCHAR(20),
        owner VARCHAR(255),
        created_by VARCHAR(36),
        updated_by VARCHAR(36),
        created_at TIMESTAMP WITH TIME ZONE NOT NULL,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL,
        deleted_at TIMESTAMP WITH TIME ZONE
    )
    """,
]


def init_schema(db: SQLClient) -> None:
    """Create all tables and indexes that don't exist yet. Idempotent."""
    for statement in _AUTH_TABLES + _CRM_TABLES:
        db.execute(statement)
    logger.info("Database schema ready (%s)", db.dialect)
