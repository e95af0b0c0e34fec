"""
Admin Settings Service

Pricing settings behind a short-lived 4-digit security code.

Flow:
1. generate_security_code() issues a code, stores only its SHA-256 hash
   and an expiry, and returns the plain code once
2. update_settings() checks the code, validates and stores the new
   pricing, reprices every repair task and writes an audit entry
3. preview_impact() shows the effect of proposed pricing without a code
   and without writing anything
"""

import os
import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from app.services.pricing import (
    DEFAULT_PRICING,
    analyze_pricing_impact,
    recalculate_task_prices,
    resolve_pricing,
    to_dict,
)
from app.services.supabase_client import SettingsStore, get_settings_store

logger = logging.getLogger(__name__)

SECURITY_CODE_TTL_MINUTES = int(os.getenv("SECURITY_CODE_TTL_MINUTES", "60"))

MAX_WAGE = 200


class SettingsError(Exception):
    """Base error for admin settings operations"""
    status_code = 500


class SettingsNotFoundError(SettingsError):
    status_code = 404


class SecurityCodeError(SettingsError):
    """Invalid, expired or never-generated security code"""
    status_code = 403

    def __init__(self, message: str, needs_generation: bool = False):
        super().__init__(message)
        self.needs_generation = needs_generation
        if needs_generation:
            self.status_code = 400


class SettingsValidationError(SettingsError):
    status_code = 400


# ============== Security Code ==============

def hash_security_code(code: str) -> str:
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


def _new_code() -> str:
    return str(secrets.randbelow(9000) + 1000)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_code_expired(settings: Dict[str, Any], now: Optional[datetime] = None) -> bool:
    """Missing or unparseable expiry counts as expired"""
    expires_at = _parse_timestamp(settings.get("security_code_expires_at"))
    if expires_at is None:
        return True
    return (now or datetime.now(timezone.utc)) > expires_at


class SettingsService:
    """Admin settings operations over a SettingsStore"""

    def __init__(self, store: Optional[SettingsStore] = None, ttl_minutes: int = SECURITY_CODE_TTL_MINUTES):
        self.store = store or get_settings_store()
        self.ttl = timedelta(minutes=ttl_minutes)

    async def _load(self) -> Dict[str, Any]:
        settings = await self.store.get_settings()
        if not settings:
            raise SettingsNotFoundError("Settings not found")
        return settings

    # =========================================================================
    # READ
    # =========================================================================

    async def get_public_settings(self) -> Dict[str, Any]:
        """Settings without the code hash"""
        settings = await self._load()
        expires_at = settings.get("security_code_expires_at")
        return {
            "pricing": resolve_pricing(settings.get("pricing")),
            "updatedAt": settings.get("updated_at"),
            "updatedBy": settings.get("updated_by"),
            "securityCodeConfigured": bool(settings.get("security_code_hash")),
            "securityCodeExpiresAt": expires_at if isinstance(expires_at, str) else None,
        }

    async def get_pricing(self) -> Dict[str, float]:
        """Live pricing, falling back to defaults when no document exists"""
        settings = await self.store.get_settings()
        return resolve_pricing(settings.get("pricing") if settings else None)

    # =========================================================================
    # SECURITY CODE
    # =========================================================================

    async def generate_security_code(self, issued_by: Optional[str] = None) -> Dict[str, Any]:
        """
        Issue a new 4-digit code.

        Creates the settings document with default pricing when it does not
        exist yet. The plain code is only ever returned here.
        """
        existing = await self.store.get_settings()
        code = _new_code()
        expires_at = datetime.now(timezone.utc) + self.ttl

        fields: Dict[str, Any] = {
            "security_code_hash": hash_security_code(code),
            "security_code_expires_at": expires_at.isoformat(),
        }
        if existing:
            await self.store.save_settings(fields)
        else:
            logger.info("[Settings] Initializing settings document with default pricing")
            await self.store.create_settings({**fields, "pricing": dict(DEFAULT_PRICING)})

        await self.store.insert_audit({
            "action": "security_code_generated",
            "updated_by": issued_by,
        })
        logger.info(f"[Settings] Security code generated, expires {expires_at.isoformat()}")

        return {
            "securityCode": code,
            "expiresAt": expires_at.isoformat(),
        }

    async def verify_security_code(self, code: Optional[str], actor: Optional[str] = None) -> Dict[str, Any]:
        """
        Check a code against the stored hash and expiry.

        Raises SecurityCodeError (400 when no code was ever generated,
        403 when wrong or expired).
        """
        if not code:
            raise SettingsValidationError("Security code required")

        settings = await self.store.get_settings()
        stored_hash = (settings or {}).get("security_code_hash")
        if not stored_hash:
            raise SecurityCodeError(
                "No security code generated yet. Please generate a code first.",
                needs_generation=True
            )

        reason = None
        if not hmac.compare_digest(hash_security_code(str(code)), stored_hash):
            reason = "invalid_code"
        elif is_code_expired(settings):
            reason = "expired_code"

        await self.store.insert_audit({
            "action": "security_code_verification",
            "success": reason is None,
            "reason": reason,
            "updated_by": actor,
        })

        if reason == "invalid_code":
            logger.warning("[Settings] Security code verification failed: invalid code")
            raise SecurityCodeError("Invalid security code")
        if reason == "expired_code":
            logger.warning("[Settings] Security code verification failed: expired code")
            raise SecurityCodeError("Security code has expired")

        return {
            "valid": True,
            "expiresAt": settings.get("security_code_expires_at"),
        }

    # =========================================================================
    # UPDATE / PREVIEW
    # =========================================================================

    async def update_settings(
        self,
        pricing: Dict[str, Any],
        security_code: Optional[str],
        updated_by: Optional[str] = None
    ) -> Dict[str, Any]:
        """Store new pricing and reprice every repair task"""
        if not security_code:
            raise SettingsValidationError("Security code required")

        current = await self._load()
        stored_hash = current.get("security_code_hash")
        code_ok = bool(stored_hash) and hmac.compare_digest(hash_security_code(str(security_code)), stored_hash)
        if not code_ok or is_code_expired(current):
            raise SecurityCodeError("Invalid or expired security code")

        new_pricing = validate_pricing(pricing)
        previous_pricing = resolve_pricing(current.get("pricing"))

        await self.store.save_settings({"pricing": new_pricing, "updated_by": updated_by})

        tasks = await self.store.list_repair_tasks()
        recalculation = recalculate_task_prices(tasks, new_pricing)
        for update in recalculation.updates:
            await self.store.update_task_price(update.task_id, update.new_price, to_dict(update.breakdown))

        logger.info(
            f"[Settings] Pricing updated: {len(recalculation.updates)}/{recalculation.total_tasks} "
            f"tasks repriced, {recalculation.errors} errors"
        )

        await self.store.insert_audit({
            "action": "pricing_update",
            "previous_pricing": previous_pricing,
            "new_pricing": new_pricing,
            "tasks_updated": len(recalculation.updates),
            "errors": recalculation.errors,
            "updated_by": updated_by,
        })

        return {
            "success": True,
            "pricing": new_pricing,
            "recalculation": {
                "total_tasks": recalculation.total_tasks,
                "updated": len(recalculation.updates),
                "errors": recalculation.errors,
                "error_details": recalculation.error_details,
                "calculated_at": recalculation.calculated_at.isoformat(),
            },
        }

    async def preview_impact(self, proposed: Dict[str, Any]) -> Dict[str, Any]:
        """Price changes under proposed settings; no code, no writes"""
        proposed_pricing = validate_pricing(proposed)
        current_pricing = await self.get_pricing()
        tasks = await self.store.list_repair_tasks()
        return to_dict(analyze_pricing_impact(tasks, current_pricing, proposed_pricing))


def validate_pricing(pricing: Optional[Dict[str, Any]]) -> Dict[str, float]:
    """
    Range-check a pricing document and merge it over the defaults.

    Wage 0-200, material markup at least 1, each fee a fraction 0-1.
    """
    if not isinstance(pricing, dict):
        raise SettingsValidationError("Pricing must be an object")

    for key, value in pricing.items():
        if key in DEFAULT_PRICING and value is not None:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise SettingsValidationError(f"{key} must be a number")

    resolved = resolve_pricing(pricing)

    if not 0 <= resolved["wage"] <= MAX_WAGE:
        raise SettingsValidationError("Invalid wage amount")
    if resolved["materialMarkup"] < 1:
        raise SettingsValidationError("Material markup must be at least 1.0")
    for key, label in (
        ("administrativeFee", "Administrative fee"),
        ("businessFee", "Business fee"),
        ("consumablesFee", "Consumables fee"),
    ):
        if not 0 <= resolved[key] <= 1:
            raise SettingsValidationError(f"{label} must be between 0 and 100%")

    return resolved


# Singleton instance
_settings_service: Optional[SettingsService] = None


def get_settings_service() -> SettingsService:
    """Get or create the admin settings service"""
    global _settings_service
    if _settings_service is None:
        _settings_service = SettingsService()
    return _settings_service
