"""FastAPI dependency injection helpers."""

from fastapi import Request

from chauffeur.services.container import Services
from chauffeur.services.dispatch import DispatchEngine
from chauffeur.services.gateway import PollingGateway
from chauffeur.workers.notifier import NotificationDispatcher


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_engine(request: Request) -> DispatchEngine:
    return get_services(request).engine


def get_gateway(request: Request) -> PollingGateway:
    return get_services(request).gateway


def get_notifier(request: Request) -> NotificationDispatcher:
    return get_services(request).notifier
