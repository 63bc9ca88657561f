"""Wires the store, engine, workers and read surface together."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from chauffeur.config import Settings, settings as default_settings
from chauffeur.domain.feeds import (
    FlightFeed,
    PositionFeed,
    RandomWalkPositionFeed,
    SimulatedFlightFeed,
)
from chauffeur.infrastructure.repositories import Store
from chauffeur.services.dispatch import DispatchEngine
from chauffeur.services.gateway import LivePoller, PollingGateway, SnapshotCallback
from chauffeur.workers.notifier import (
    LoggingSmsTransport,
    NotificationDispatcher,
    SmsTransport,
)
from chauffeur.workers.telemetry import TelemetrySimulator


@dataclass
class Services:
    settings: Settings
    store: Store
    notifier: NotificationDispatcher
    engine: DispatchEngine
    gateway: PollingGateway
    telemetry: TelemetrySimulator

    def poller(self, on_snapshot: SnapshotCallback) -> LivePoller:
        """A read-surface refresher on the configured polling cadence."""
        return LivePoller(
            self.gateway, on_snapshot, interval=self.settings.poll_interval_seconds
        )


def build_services(
    config: Optional[Settings] = None,
    transport: Optional[SmsTransport] = None,
    position_feed: Optional[PositionFeed] = None,
    flight_feed: Optional[FlightFeed] = None,
    rng: Optional[random.Random] = None,
) -> Services:
    config = config or default_settings
    store = Store()
    notifier = NotificationDispatcher(
        transport or LoggingSmsTransport(),
        queue_size=config.notification_queue_size,
        failure_history=config.notification_failure_history,
    )
    engine = DispatchEngine(
        store,
        notifier,
        brand_name=config.brand_name,
        payment_link_base_url=config.payment_link_base_url,
    )
    telemetry = TelemetrySimulator(
        store,
        position_feed
        or RandomWalkPositionFeed(config.position_drift_degrees, rng=rng),
        flight_feed
        or SimulatedFlightFeed(config.max_flight_delay_minutes, rng=rng),
        position_interval=config.position_drift_interval_seconds,
        flight_interval=config.flight_drift_interval_seconds,
    )
    return Services(
        settings=config,
        store=store,
        notifier=notifier,
        engine=engine,
        gateway=PollingGateway(store),
        telemetry=telemetry,
    )
