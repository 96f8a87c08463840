# mariage/mailer.py  # Envío de correos transaccionales.

# =================================================================================
# 📧 MÓDULO DE ENVÍO DE CORREOS (HTML)
# ---------------------------------------------------------------------------------
# Centraliza el envío por SendGrid o Gmail SMTP (EMAIL_PROVIDER) y las tres
# plantillas del producto: código de verificación, código de recuperación e
# invitación al equipo. Con DRY_RUN=1 (por defecto) solo se registra en logs.
# Los envíos devuelven bool; quien llama decide cómo reportar el fallo.
# =================================================================================

# 🐍 Importaciones
import os                                                        # Variables de entorno (.env).
import html                                                      # Escape de valores libres en HTML.
import json                                                      # Payload del webhook.
import smtplib                                                   # Envío SMTP (Gmail).
from email.mime.text import MIMEText                             # Partes del mensaje.
from email.mime.multipart import MIMEMultipart                   # Contenedor multipart/alternative.
from ssl import create_default_context                           # Contexto TLS.

import requests                                                  # Webhook de alertas.
from loguru import logger                                        # Logger del proyecto.

# =================================================================================
# ✅ Configuración
# =================================================================================
DRY_RUN = os.getenv("DRY_RUN", "1") == "1"
EMAIL_SENDER_NAME = os.getenv("EMAIL_SENDER_NAME", "Mariage")
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000").rstrip("/")

# Con envíos reales se exige la configuración del proveedor elegido.
if not DRY_RUN:
    provider_now = os.getenv("EMAIL_PROVIDER", "sendgrid").lower()
    if provider_now == "sendgrid":
        if not os.getenv("SENDGRID_API_KEY") or not os.getenv("EMAIL_FROM"):
            raise RuntimeError("Faltan SENDGRID_API_KEY o EMAIL_FROM para envíos reales con SendGrid.")
    elif provider_now == "gmail":
        if not os.getenv("EMAIL_USER") or not os.getenv("EMAIL_PASS"):
            raise RuntimeError("Faltan EMAIL_USER o EMAIL_PASS para envíos reales con Gmail.")
    else:
        raise RuntimeError(f"EMAIL_PROVIDER desconocido: {provider_now}")


def mask_email(addr: str | None) -> str:
    if not addr:
        return "<no-email>"
    if "@" not in addr:
        return addr[:2] + "***"
    name, dom = addr.split("@", 1)
    return name[:2] + "***@" + dom

# =================================================================================
# 📢 Webhook de alertas (opcional)
# =================================================================================
def send_alert_webhook(title: str, message: str) -> None:
    """Envía alerta a ALERT_WEBHOOK_URL si está definido; silencioso si no."""
    url = os.getenv("ALERT_WEBHOOK_URL")
    if not url:
        return
    try:
        payload = {"text": f"{title}\n{message}"}
        requests.post(url, data=json.dumps(payload), headers={"Content-Type": "application/json"}, timeout=5)
    except requests.RequestException as e:
        logger.error("No se pudo notificar alerta por webhook: {}", e)

# =================================================================================
# ✉️ Motores de envío
# =================================================================================
def _send_via_gmail(to_email: str, subject: str, html_body: str, text_fallback: str) -> bool:
    host = os.getenv("EMAIL_HOST", "smtp.gmail.com")
    port = int(os.getenv("EMAIL_PORT", "587"))
    user = os.getenv("EMAIL_USER", "")
    pwd = os.getenv("EMAIL_PASS", "")
    from_addr = os.getenv("EMAIL_FROM", user)
    timeout = float(os.getenv("SMTP_TIMEOUT", "30"))

    msg = MIMEMultipart("alternative")
    msg["From"] = f"{EMAIL_SENDER_NAME} <{from_addr}>"
    msg["To"] = to_email.strip()
    msg["Subject"] = subject
    if text_fallback:
        msg.attach(MIMEText(text_fallback, "plain", "utf-8"))  # Texto primero, HTML después.
    msg.attach(MIMEText(html_body, "html", "utf-8"))

    try:
        if port == 465:
            server = smtplib.SMTP_SSL(host, port, timeout=timeout, context=create_default_context())
        else:
            server = smtplib.SMTP(host, port, timeout=timeout)
            server.ehlo()
            server.starttls(context=create_default_context())
            server.ehlo()
        with server:
            server.login(user, pwd)
            server.sendmail(from_addr, [msg["To"]], msg.as_string())
        logger.info("Gmail SMTP → enviado a {}", mask_email(to_email))
        return True
    except (smtplib.SMTPException, OSError) as e:
        logger.exception("Gmail SMTP → excepción enviando a {}: {}", mask_email(to_email), e)
        return False


def _send_via_sendgrid(to_email: str, subject: str, html_body: str, text_fallback: str) -> bool:
    from sendgrid import SendGridAPIClient                       # Import perezoso: solo en envíos reales.
    from sendgrid.helpers.mail import Mail, From

    message = Mail(
        from_email=From(os.getenv("EMAIL_FROM", ""), EMAIL_SENDER_NAME),
        to_emails=to_email,
        subject=subject,
        plain_text_content=(text_fallback or "Este correo se ve mejor en un cliente compatible con HTML."),
        html_content=html_body,
    )
    try:
        response = SendGridAPIClient(os.getenv("SENDGRID_API_KEY", "")).send(message)
    except Exception as e:  # El cliente de SendGrid lanza errores HTTP propios y de red.
        logger.exception("Excepción enviando con SendGrid a {}: {}", mask_email(to_email), e)
        return False

    logger.info("SendGrid response: {} | X-Message-Id: {}", response.status_code, response.headers.get("X-Message-Id"))
    if 200 <= response.status_code < 300:
        return True
    logger.error("SendGrid error -> status={} | body={}", response.status_code, getattr(response, "body", None))
    return False


def send_email_html(to_email: str, subject: str, html_body: str, text_fallback: str = "") -> bool:
    """Envía un correo HTML por el proveedor configurado. Devuelve True si salió."""
    if os.getenv("DRY_RUN", "1") == "1":                         # Se evalúa en runtime (tests/CI).
        logger.info("[DRY_RUN] Simular envío a {} | Asunto: {}", mask_email(to_email), subject)
        return True

    provider = os.getenv("EMAIL_PROVIDER", "sendgrid").lower()
    if provider == "gmail":
        ok = _send_via_gmail(to_email, subject, html_body, text_fallback)
    else:
        ok = _send_via_sendgrid(to_email, subject, html_body, text_fallback)

    if not ok:
        send_alert_webhook("🚨 Mailer error", f"No se pudo enviar '{subject}' a {mask_email(to_email)}.")
    return ok

# =================================================================================
# 🧩 Plantillas
# =================================================================================
_CODE_BLOCK = (
    '<p style="font-size:24px;font-weight:bold;letter-spacing:5px;'
    'background:#f0f0f0;padding:10px;border-radius:5px;">{code}</p>'
)

def _wrap(inner: str) -> str:
    return f'<div style="font-family:Arial,sans-serif;text-align:center;color:#333;">{inner}</div>'

# =================================================================================
# 📨 Helpers de alto nivel
# =================================================================================
def send_verification_email(to_email: str, code: str) -> bool:
    """Código de verificación de cuenta (expira en 15 minutos)."""
    body = _wrap(
        "<h2>¡Bienvenido(a) a Mariage!</h2>"
        "<p>Gracias por registrarte. Usa este código para verificar tu email:</p>"
        + _CODE_BLOCK.format(code=html.escape(code))
        + "<p>Este código expira en 15 minutos.</p>"
    )
    text = f"Tu código de verificación de Mariage es {code}. Expira en 15 minutos."
    return send_email_html(to_email, "Tu código de verificación de Mariage", body, text)


def send_password_reset_email(to_email: str, code: str) -> bool:
    """Código de recuperación de contraseña."""
    body = _wrap(
        "<h2>Recuperación de contraseña</h2>"
        "<p>Recibimos una solicitud para restablecer tu contraseña. Usa este código:</p>"
        + _CODE_BLOCK.format(code=html.escape(code))
        + "<p>Este código expira en 15 minutos. Si no lo solicitaste, ignora este correo.</p>"
    )
    text = f"Tu código de recuperación de Mariage es {code}. Expira en 15 minutos."
    return send_email_html(to_email, "Recuperación de contraseña - Mariage", body, text)


def build_accept_url(token: str) -> str:
    return f"{FRONTEND_URL}/accept-invitation?token={token}"


def send_team_invitation_email(to_email: str, inviter_name: str, wedding_name: str, accept_url: str) -> bool:
    """Invitación a unirse al equipo de planificación de una boda."""
    body = _wrap(
        "<h2>¡Te invitaron a planear una boda!</h2>"
        f"<p><strong>{html.escape(inviter_name)}</strong> te invitó a colaborar en la boda de "
        f"<strong>{html.escape(wedding_name)}</strong>.</p>"
        f'<p><a href="{html.escape(accept_url, quote=True)}" '
        'style="background:#b5838d;color:#fff;padding:12px 20px;border-radius:5px;text-decoration:none;">'
        "Aceptar invitación</a></p>"
        "<p>Si no tienes cuenta, regístrate con este mismo email antes de aceptar.</p>"
    )
    text = f"{inviter_name} te invitó a planear la boda de {wedding_name}. Acepta aquí: {accept_url}"
    return send_email_html(to_email, f"Invitación para planear la boda de {wedding_name}", body, text)
