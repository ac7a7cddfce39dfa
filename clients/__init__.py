# Infrastructure clients
from clients.vault_client import (
    VaultClient,
    resolve_secret,
    get_database_url,
    get_jwt_secret,
    get_valkey_url,
    get_email_config,
)
from clients.database import SQLClient, create_sql_client, create_orm_engine
from clients.valkey_client import ValkeyClient
from clients.email_client import EmailGatewayClient, EmailGatewayError
