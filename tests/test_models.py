"""Announcement parsing from untrusted payloads."""

import pytest

from discovery.models import PeerRecord, ServiceAnnouncement


class TestServiceAnnouncementFromPayload:

    def test_complete_payload(self):
        a = ServiceAnnouncement.from_payload({
            "name": "Bob-PC",
            "host": "bob.local",
            "address": "10.0.0.5",
            "port": 5050,
            "addresses": ["10.0.0.5", "fe80::1"],
            "txt": {"device": "Bob-PC"},
        })
        assert a.name == "Bob-PC"
        assert a.address == "10.0.0.5"
        assert a.addresses == ["10.0.0.5", "fe80::1"]
        assert a.txt == {"device": "Bob-PC"}

    def test_none_payload(self):
        a = ServiceAnnouncement.from_payload(None)
        assert a == ServiceAnnouncement()

    def test_wrong_types_degrade_to_defaults(self):
        a = ServiceAnnouncement.from_payload({
            "name": 42,
            "host": None,
            "port": "not-a-port",
            "addresses": "10.0.0.5",
            "txt": ["device"],
        })
        assert a.name == ""
        assert a.host == ""
        assert a.address is None
        assert a.port == 0
        assert a.addresses == []
        assert a.txt == {}

    def test_numeric_string_port(self):
        assert ServiceAnnouncement.from_payload({"port": "5050"}).port == 5050

    @pytest.mark.parametrize("port", [float("inf"), float("-inf"), float("nan"), 70000, -1])
    def test_unusable_port_degrades_to_zero(self, port):
        assert ServiceAnnouncement.from_payload({"port": port}).port == 0

    def test_bytes_txt_are_decoded(self):
        a = ServiceAnnouncement.from_payload({"txt": {b"device": b"Bob-PC", b"flag": None}})
        assert a.txt == {"device": "Bob-PC", "flag": ""}

    def test_attributes_alias_for_txt(self):
        a = ServiceAnnouncement.from_payload({"attributes": {"device": "Bob-PC"}})
        assert a.txt == {"device": "Bob-PC"}

    def test_non_string_addresses_dropped(self):
        a = ServiceAnnouncement.from_payload({"addresses": ["10.0.0.5", None, 7, ""]})
        assert a.addresses == ["10.0.0.5"]


class TestPeerRecordWireShape:

    def test_serialized_fields(self):
        peer = PeerRecord(
            id="Bob-PC|bob.local|5050",
            name="Bob-PC",
            host="bob.local",
            port=5050,
            addresses=["10.0.0.5"],
            txt={"device": "Bob-PC"},
        )
        assert peer.model_dump() == {
            "id": "Bob-PC|bob.local|5050",
            "name": "Bob-PC",
            "host": "bob.local",
            "port": 5050,
            "addresses": ["10.0.0.5"],
            "txt": {"device": "Bob-PC"},
        }
