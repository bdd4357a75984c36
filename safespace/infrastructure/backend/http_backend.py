from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from safespace.application.exceptions import DataFetchFailure, SubmissionFailure
from safespace.application.ports.appointments import AppointmentQueryPort
from safespace.application.ports.booking import BookingRequest, BookingSubmissionPort
from safespace.application.utils.status_classifier import ACTIVE_STATUSES
from safespace.core.config import settings
from safespace.domain.entities.appointment import Appointment
from safespace.infrastructure.backend.records import parse_appointment_records


class HttpAppointmentsBackend(AppointmentQueryPort, BookingSubmissionPort):
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = (base_url or settings.BACKEND_BASE_URL).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.BACKEND_API_KEY
        self._client = client or httpx.AsyncClient(timeout=timeout or settings.BACKEND_TIMEOUT_SECONDS)
        self._inflight: dict[str, asyncio.Task] = {}
        self._logger = logging.getLogger(__name__)

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def _fetch_all(self, user_id: str) -> list[Appointment]:
        """One GET per user serves every concurrent upcoming/past query."""
        task = self._inflight.get(user_id)
        if task is None:
            task = asyncio.ensure_future(self._request_all(user_id))
            self._inflight[user_id] = task
            task.add_done_callback(lambda done: self._forget(user_id, done))
        return await asyncio.shield(task)

    def _forget(self, user_id: str, task: asyncio.Task) -> None:
        if self._inflight.get(user_id) is task:
            del self._inflight[user_id]

    async def _request_all(self, user_id: str) -> list[Appointment]:
        try:
            response = await self._client.get(
                f"{self._base_url}/api/appointments",
                params={"clerkUserId": user_id},
                headers=self._headers(),
            )
            response.raise_for_status()
            return parse_appointment_records(response.json())
        except (httpx.HTTPError, ValueError) as e:
            self._logger.error("Error fetching appointments", extra={"user_id": user_id, "error": str(e)})
            raise DataFetchFailure(f"Unable to fetch appointments: {e}") from e

    async def fetch_upcoming(self, user_id: str) -> list[Appointment]:
        return [a for a in await self._fetch_all(user_id) if a.raw_status in ACTIVE_STATUSES]

    async def fetch_past(self, user_id: str) -> list[Appointment]:
        return [a for a in await self._fetch_all(user_id) if a.raw_status not in ACTIVE_STATUSES]

    async def lookup_worker_name(self, worker_id: str) -> str | None:
        try:
            response = await self._client.get(
                f"{self._base_url}/api/support-workers/{worker_id}",
                headers=self._headers(),
            )
            if response.status_code == 404:
                return None
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise DataFetchFailure(f"Unable to look up support worker {worker_id}: {e}") from e

        if not isinstance(data, dict):
            return None
        worker = data.get("supportWorker") if isinstance(data.get("supportWorker"), dict) else data
        name = str(worker.get("name") or worker.get("fullName") or "").strip()
        return name or None

    async def submit_booking(self, request: BookingRequest) -> str:
        payload: dict[str, Any] = {
            "clerkUserId": request.user_id,
            "supportWorkerId": request.support_worker_id,
            "appointmentDate": request.appointment_date,
            "appointmentTime": request.appointment_time,
            "sessionType": request.session_type,
            "notes": request.notes,
        }
        result = await self._send("POST", f"{self._base_url}/api/appointments", payload)
        appointment = result.get("appointment") or {}
        appointment_id = appointment.get("id") if isinstance(appointment, dict) else None
        if appointment_id is None:
            raise SubmissionFailure("No appointment ID returned from backend")
        self._logger.info("Appointment created", extra={"appointment_id": appointment_id, "user_id": request.user_id})
        return str(appointment_id)

    async def reschedule_booking(self, appointment_id: str, request: BookingRequest) -> str:
        payload = {
            "newDate": request.appointment_date,
            "newTime": request.appointment_time,
            "reason": f"Rescheduled via app by user {request.user_id}",
        }
        result = await self._send("PUT", f"{self._base_url}/api/appointments/{appointment_id}/reschedule", payload)
        appointment = result.get("appointment") or {}
        new_id = appointment.get("id") if isinstance(appointment, dict) else None
        self._logger.info("Appointment rescheduled", extra={"appointment_id": appointment_id})
        return str(new_id or appointment_id)

    async def cancel_booking(self, appointment_id: str, user_id: str, reason: str | None = None) -> None:
        payload = {"cancellationReason": reason or "Cancelled by user"}
        await self._send("PUT", f"{self._base_url}/api/appointments/{appointment_id}/cancel", payload)
        self._logger.info("Appointment cancelled", extra={"appointment_id": appointment_id, "user_id": user_id})

    async def _send(self, method: str, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._client.request(method, url, json=payload, headers=self._headers())
            response.raise_for_status()
            result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            self._logger.error("Error submitting appointment", extra={"error": str(e)})
            raise SubmissionFailure(str(e)) from e

        if not isinstance(result, dict) or not result.get("success"):
            error = result.get("error") if isinstance(result, dict) else None
            raise SubmissionFailure(error or "Backend rejected the appointment")
        return result
