"""
Self-service pages: FAQ, contact form and notifications.
"""
from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from backend.portal.api import ApiClient, ApiError
from backend.portal.faqs import FAQService, group_by_category
from backend.portal.inquiries import InquiryService
from backend.portal.notifications import NotificationService

from ..components import ContactForm, FAQList, NotificationList
from ..pages import api_client, get_auth, layout_response, see_other

support_router = APIRouter(tags=["Support"])

CONTACT_REQUIRED = ("name", "email", "phone", "message")


@support_router.get("/faq", response_class=HTMLResponse)
async def faq_page(request: Request):
    faqs = FAQService(api_client(request)).list()
    content = f"<h1>Frequently asked questions</h1>{FAQList(group_by_category(faqs)).render()}"
    return layout_response(request, "FAQ", content)


@support_router.get("/contact", response_class=HTMLResponse)
async def contact_form(request: Request):
    user = get_auth(request).user
    values = {"name": user.name, "email": user.email, "phone": user.phone or user.whatsapp_number or ""} if user else {}
    return layout_response(request, "Contact", ContactForm(values=values).render())


@support_router.post("/contact", response_class=HTMLResponse)
async def contact_submit(request: Request):
    form = await request.form()
    values = {key: str(form.get(key) or "").strip() for key in CONTACT_REQUIRED + ("subject",)}
    if any(not values[key] for key in CONTACT_REQUIRED):
        page = ContactForm(values=values, error="Please fill in name, email, phone and message.").render()
        return layout_response(request, "Contact", page, status_code=400)
    try:
        # Inquiries are accepted from anonymous visitors.
        InquiryService(ApiClient()).create(
            name=values["name"],
            email=values["email"],
            phone=values["phone"],
            message=values["message"],
            subject=values["subject"],
        )
    except ApiError:
        page = ContactForm(values=values, error="Your message could not be sent. Please try again later.").render()
        return layout_response(request, "Contact", page, status_code=502)
    return layout_response(request, "Contact", ContactForm(sent=True).render())


@support_router.get("/notifications", response_class=HTMLResponse)
async def notifications_page(request: Request):
    notifications = NotificationService(api_client(request)).list()
    content = f"<h1>Notifications</h1>{NotificationList(notifications).render()}"
    return layout_response(request, "Notifications", content)


@support_router.post("/notifications/read-all")
async def notifications_read_all(request: Request):
    NotificationService(api_client(request)).mark_all_as_read()
    return see_other("/notifications")


@support_router.post("/notifications/{notification_id}/read")
async def notification_read(request: Request, notification_id: int):
    NotificationService(api_client(request)).mark_as_read(notification_id)
    return see_other("/notifications")
