"""
Service d'envoi d'emails SMTP.
Utilisé pour la vérification d'adresse à l'inscription et l'avertissement
de suppression après désactivation d'un compte élève.

Un échec d'envoi est journalisé mais ne fait jamais échouer l'opération
qui l'a déclenché (pas de nouvel essai).
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from urllib.parse import urlencode

from app.config import settings

logger = logging.getLogger(__name__)


def send_email(to_email: str, subject: str, html_body: str) -> bool:
    """Envoie un email HTML. Retourne False (sans lever) en cas d'échec SMTP."""
    msg = MIMEMultipart("alternative")
    msg["From"] = settings.SMTP_FROM
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.attach(MIMEText(html_body, "html", "utf-8"))

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
            if settings.SMTP_USE_TLS:
                server.starttls()
            if settings.SMTP_USERNAME:
                server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.send_message(msg)
    except Exception as exc:
        logger.error("Échec de l'envoi de l'email '%s' à %s : %s", subject, to_email, exc)
        return False

    logger.info("Email '%s' envoyé à %s", subject, to_email)
    return True


def build_verification_link(username: str, raw_token: str) -> str:
    query = urlencode({"username": username, "token": raw_token})
    return f"{settings.APP_URL}/api/v1/accounts/verify-email?{query}"


def send_verification_email(to_email: str, username: str, raw_token: str) -> bool:
    link = build_verification_link(username, raw_token)
    html_content = f"""
    <html>
      <body style="font-family: Arial, sans-serif; color: #333; max-width: 600px; margin: auto;">
        <p>Bonjour,</p>
        <p>Veuillez cliquer sur le lien ci-dessous pour vérifier votre adresse email :</p>
        <p><a href="{link}">Vérifier mon adresse</a></p>
        <p style="font-size: 12px; color: #888;">
          Ce lien expire dans {settings.ACTIVATION_TOKEN_EXPIRE_HOURS} heures.
        </p>
      </body>
    </html>
    """
    return send_email(to_email, "Vérifiez votre adresse email", html_content)


def send_deactivation_warning(to_email: str) -> bool:
    html_content = f"""
    <html>
      <body style="font-family: Arial, sans-serif; color: #333; max-width: 600px; margin: auto;">
        <p>Votre compte a été désactivé.</p>
        <p>
          Il sera définitivement supprimé dans {settings.DEACTIVATION_RETENTION_DAYS} jours,
          sauf si vous vous reconnectez pour le réactiver.
        </p>
      </body>
    </html>
    """
    return send_email(to_email, "Compte désactivé", html_content)
