"""
app/services/twilio_service.py

Purpose: Twilio WhatsApp alert sending

- Sends WhatsApp messages to the admin via the Twilio REST API
- Alternative notification channel to email
"""

import httpx
from typing import Dict, Any, Optional
from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


class TwilioService:
    """Service for sending WhatsApp messages via Twilio"""

    def __init__(
        self,
        account_sid: Optional[str] = None,
        auth_token: Optional[str] = None,
        whatsapp_number: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.account_sid = account_sid or settings.TWILIO_ACCOUNT_SID
        self.auth_token = auth_token or settings.TWILIO_AUTH_TOKEN
        self.whatsapp_number = whatsapp_number or settings.TWILIO_WHATSAPP_NUMBER  # whatsapp:+14155238886
        self.base_url = f"https://api.twilio.com/2010-04-01/Accounts/{self.account_sid}"
        self._transport = transport

    async def send_message(self, to_phone: str, message: str) -> Dict[str, Any]:
        """
        Sends a WhatsApp message via Twilio

        Args:
            to_phone: Recipient phone (+919876543210)
            message: Message text

        Returns:
            {
                "success": True/False,
                "message_sid": "SMxxx...",
                "error": "Optional error message"
            }
        """
        if not to_phone.startswith("whatsapp:"):
            to_phone = f"whatsapp:{to_phone}"

        data = {
            "From": self.whatsapp_number,
            "To": to_phone,
            "Body": message
        }

        logger.info(f"📤 Sending Twilio message to {to_phone}")

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    f"{self.base_url}/Messages.json",
                    data=data,
                    auth=(self.account_sid or "", self.auth_token or ""),
                    timeout=10.0
                )
        except httpx.TimeoutException:
            logger.error("Twilio API timeout")
            return {"success": False, "error": "Twilio API timeout"}
        except httpx.HTTPError as e:
            logger.error(f"Error sending Twilio message: {e}")
            return {"success": False, "error": str(e)}

        if response.status_code in [200, 201]:
            result = response.json()
            logger.info(f"✅ Message sent: SID={result.get('sid')}")
            return {
                "success": True,
                "message_sid": result.get("sid"),
                "status": result.get("status")
            }

        logger.error(f"❌ Twilio API error: {response.status_code} - {response.text}")
        return {
            "success": False,
            "error": f"Twilio API error: {response.status_code}"
        }

    def is_configured(self) -> bool:
        """Check if Twilio is properly configured"""
        return bool(
            self.account_sid
            and self.auth_token
            and self.whatsapp_number
            and self.account_sid != "your_twilio_sid"
        )


# Singleton instance
twilio_service = TwilioService()
