from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from typing import Optional

from chainvote.blockchain.solana_client import BlockchainClient, SolanaRpcClient
from chainvote.schemas.user import PrincipalContext
from chainvote.services import identity

# auto_error is off so a missing header reaches authenticate() and gets the domain 401 body
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)


def get_current_principal(token: Optional[str] = Depends(oauth2_scheme)) -> PrincipalContext:
    """Decode the bearer credential into the calling principal.
    Any endpoint that requires authentication can use this dependency.
    """
    return identity.authenticate(token)


def get_blockchain_client() -> BlockchainClient:
    """RPC client for the configured Solana network; overridden in tests."""
    return SolanaRpcClient()
