from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Optional
from jose import jwt
from jose.exceptions import JOSEError
from storefront.auth.constants import logger
from storefront.config.settings import config_settings


@dataclass(frozen=True)
class VerifiedIdentity:
    subject_id: str
    email: Optional[str] = None
    privileged: bool = False


class IdentityVerifier:
    """Boundary adapter over the identity provider's signed JWTs."""

    def __init__(self, verify_key: Optional[str], algorithms: List[str], *,
                 audience: Optional[str] = None, issuer: Optional[str] = None,
                 admin_claim: str = "admin"):
        self.verify_key = verify_key
        self.algorithms = algorithms
        self.audience = audience
        self.issuer = issuer
        self.admin_claim = admin_claim

    def _decode(self, token: Optional[str]) -> Optional[Dict[str, Any]]:
        if not token or not self.verify_key:
            return None
        try:
            return jwt.decode(
                token,
                key=self.verify_key,
                algorithms=self.algorithms,
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_aud": bool(self.audience)},
            )
        except JOSEError as e:
            logger.warning("auth.identity.invalid_token", extra={"reason": type(e).__name__})
            return None
        except (ValueError, TypeError, AttributeError) as e:
            # malformed key material or token shape the jose backend chokes on
            logger.warning("auth.identity.verify_error", extra={"reason": type(e).__name__})
            return None

    def verify(self, token: Optional[str]) -> Optional[VerifiedIdentity]:
        claims = self._decode(token)
        if not claims:
            return None
        subject = claims.get("sub") or claims.get("uid") or claims.get("user_id")
        if not isinstance(subject, str) or not subject.strip():
            return None
        email = claims.get("email") if isinstance(claims.get("email"), str) else None
        return VerifiedIdentity(subject_id=subject.strip(), email=email,
                                privileged=claims.get(self.admin_claim) is True)

    def verify_privileged(self, token: Optional[str]) -> Optional[VerifiedIdentity]:
        identity = self.verify(token)
        if identity is None or not identity.privileged:
            return None
        return identity


@lru_cache(maxsize=1)
def get_identity_verifier() -> IdentityVerifier:
    algorithms = [a.strip() for a in config_settings.IDENTITY_ALGORITHMS.split(",") if a.strip()]
    return IdentityVerifier(
        config_settings.IDENTITY_VERIFY_KEY,
        algorithms,
        audience=config_settings.IDENTITY_AUDIENCE,
        issuer=config_settings.IDENTITY_ISSUER,
        admin_claim=config_settings.IDENTITY_ADMIN_CLAIM,
    )
