from aiokafka import AIOKafkaProducer
import json
import logging

from .schemas import BrokerSubmissionEvent

logger = logging.getLogger(__name__)


class KafkaEventSink:
    """External sink: publishes broker-shaped submission events to a Kafka topic."""

    name = "broker"

    def __init__(self, producer: AIOKafkaProducer, topic: str):
        self._producer = producer
        self.topic = topic

    async def send(self, event: BrokerSubmissionEvent) -> None:
        payload = event.model_dump(mode="json", by_alias=True)
        await self._producer.send_and_wait(self.topic, key=event.order_id, value=payload)
        logger.debug(f"Message sent to Kafka topic '{self.topic}': {payload}")

    async def stop(self) -> None:
        logger.info("Stopping Kafka producer...")
        await self._producer.stop()


async def connect_external_sink(bootstrap_servers: str | None, topic: str) -> KafkaEventSink | None:
    """
    Resolves the optional broker once at startup. Returns None, after a single
    warning, when no broker is configured or it cannot be reached.
    """
    if not bootstrap_servers:
        logger.warning("Messaging not configured, running with in-process delivery only")
        return None

    logger.info(f"Initializing Kafka producer: {bootstrap_servers}")
    producer = AIOKafkaProducer(
        bootstrap_servers=bootstrap_servers,
        key_serializer=lambda k: k.encode('utf-8'),
        value_serializer=lambda v: json.dumps(v).encode('utf-8'),
        acks='all'
    )
    try:
        await producer.start()
    except Exception as e:
        logger.warning(f"Messaging not available ({e}), running with in-process delivery only")
        await producer.stop()
        return None
    return KafkaEventSink(producer, topic)
