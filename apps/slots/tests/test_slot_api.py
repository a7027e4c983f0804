"""Integration tests for the public slot listing."""

from __future__ import annotations

from datetime import timedelta

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.slots.models import Slot


class SlotAPITests(APITestCase):
    def setUp(self) -> None:
        start = (timezone.now() + timedelta(days=1)).replace(microsecond=0)
        self.free = Slot.objects.create(
            creator_handle="alice",
            team_member_id="tm-1",
            team_member_name="Dana",
            start_time=start,
            end_time=start + timedelta(minutes=30),
        )
        self.taken = Slot.objects.create(
            creator_handle="alice",
            start_time=start + timedelta(hours=1),
            end_time=start + timedelta(hours=1, minutes=30),
            is_available=False,
        )
        self.other = Slot.objects.create(
            creator_handle="carol",
            start_time=start,
            end_time=start + timedelta(minutes=45),
        )
        self.list_url = reverse("slot-list")

    def test_list_filters_by_handle(self) -> None:
        response = self.client.get(self.list_url, {"handle": "@Alice"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual({item["id"] for item in response.data}, {self.free.pk, self.taken.pk})

    def test_list_filters_by_availability(self) -> None:
        response = self.client.get(self.list_url, {"handle": "alice", "available": "true"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual([item["id"] for item in response.data], [self.free.pk])

    def test_list_filters_by_team_member(self) -> None:
        response = self.client.get(self.list_url, {"team_member_id": "tm-1"})

        self.assertEqual([item["team_member_name"] for item in response.data], ["Dana"])

    def test_retrieve_slot(self) -> None:
        response = self.client.get(reverse("slot-detail", args=[self.free.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["is_available"])
        self.assertEqual(response.data["creator_handle"], "alice")

    def test_slots_are_read_only(self) -> None:
        response = self.client.post(self.list_url, {"creator_handle": "alice"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
