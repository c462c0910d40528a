"""Unit tests for the response normalizer."""

import json

import pytest

from kr_transit_search.core.models import Coordinate, StopKind, TransitStop
from kr_transit_search.core.normalizer import (
    as_item_list,
    detect_format,
    first_present,
    normalize,
)


def bus_body(item_list):
    return json.dumps({"msgBody": {"itemList": item_list}}, ensure_ascii=False)


class TestBusJson:
    """Bus registry JSON responses."""

    def test_end_to_end_example(self):
        raw = (
            '{"msgBody":{"itemList":{"stationId":"123","stationNm":"Test St",'
            '"arsId":"01-001","tmX":"200000","tmY":"450000"}}}'
        )

        stops = normalize(raw, StopKind.BUS)

        assert stops == [
            TransitStop(
                kind=StopKind.BUS,
                id="123",
                name="Test St",
                auxiliary="01-001",
                coordinate=Coordinate(x="200000", y="450000"),
            )
        ]

    def test_single_object_equals_array_of_one(self):
        item = {"stId": "1", "stNm": "시청", "tmX": "1", "tmY": "2", "arsId": "02"}

        assert normalize(bus_body(item), StopKind.BUS) == normalize(
            bus_body([item]), StopKind.BUS
        )
        assert len(normalize(bus_body(item), StopKind.BUS)) == 1

    def test_name_search_variant(self, bus_name_response):
        stops = normalize(bus_name_response, StopKind.BUS)

        assert [s.id for s in stops] == ["121000012", "121000013"]
        assert stops[0].name == "강남역"
        assert stops[0].auxiliary == "22009"
        assert stops[0].coordinate == Coordinate(x="127.0281", y="37.4979")
        assert stops[0].geodetic == Coordinate(x="202614.6", y="444086.1")

    def test_location_search_variant(self, bus_location_response):
        stops = normalize(bus_location_response, StopKind.BUS)

        assert len(stops) == 1
        assert stops[0].id == "100000001"
        assert stops[0].name == "종로2가"
        assert stops[0].coordinate == Coordinate(x="126.987752", y="37.569808")
        assert stops[0].geodetic.is_empty()

    def test_gps_fallback_when_tm_missing(self):
        stops = normalize(
            bus_body({"stId": "1", "stNm": "A", "gpsX": "100", "gpsY": "200"}),
            StopKind.BUS,
        )
        assert stops[0].coordinate.x == "100"
        assert stops[0].coordinate.y == "200"

    def test_tm_wins_over_gps(self):
        stops = normalize(
            bus_body(
                {"stId": "1", "stNm": "A", "tmX": "5", "gpsX": "100", "tmY": "6", "gpsY": "7"}
            ),
            StopKind.BUS,
        )
        assert stops[0].coordinate == Coordinate(x="5", y="6")

    def test_station_id_preferred_over_st_id(self):
        stops = normalize(
            bus_body({"stationId": "A1", "stId": "B2", "stationNm": "N1", "stNm": "N2"}),
            StopKind.BUS,
        )
        assert stops[0].id == "A1"
        assert stops[0].name == "N1"

    def test_empty_primary_falls_back(self):
        stops = normalize(
            bus_body({"stationId": "", "stId": "B2", "stationNm": "", "stNm": "N2"}),
            StopKind.BUS,
        )
        assert stops[0].id == "B2"
        assert stops[0].name == "N2"

    def test_missing_coordinates_are_empty_strings(self):
        stops = normalize(bus_body({"stId": "1", "stNm": "A"}), StopKind.BUS)

        assert stops[0].coordinate.x == ""
        assert stops[0].coordinate.y == ""
        assert stops[0].auxiliary == ""

    def test_items_without_id_or_name_are_dropped(self):
        items = [
            {"stId": "1", "stNm": "Kept"},
            {"stNm": "No id"},
            {"stId": "3"},
            {"stId": "", "stNm": ""},
            "not an object",
            {"stationId": "5", "stationNm": "Also kept"},
        ]

        stops = normalize(bus_body(items), StopKind.BUS)

        assert [s.name for s in stops] == ["Kept", "Also kept"]

    def test_numeric_values_become_text(self):
        stops = normalize(
            bus_body({"stId": 123, "stNm": "A", "tmX": 200000.5, "tmY": 450000}),
            StopKind.BUS,
        )
        assert stops[0].id == "123"
        assert stops[0].coordinate == Coordinate(x="200000.5", y="450000")

    def test_empty_item_list(self):
        assert normalize('{"msgBody":{"itemList":[]}}', StopKind.BUS) == []

    def test_null_item_list(self):
        assert normalize('{"msgBody":{"itemList":null}}', StopKind.BUS) == []

    def test_error_header_yields_empty(self, caplog):
        raw = json.dumps(
            {
                "msgHeader": {"headerCd": "7", "headerMsg": "인증실패"},
                "msgBody": {"itemList": None},
            }
        )
        with caplog.at_level("WARNING"):
            assert normalize(raw, StopKind.BUS) == []
        assert "headerCd=7" in caplog.text


class TestSubwayJson:
    """Subway registry JSON responses."""

    def test_item_array(self, subway_name_response):
        stops = normalize(subway_name_response, StopKind.SUBWAY)

        assert [s.id for s in stops] == ["MTRS12222", "MTRDX4D1"]
        assert all(s.kind == StopKind.SUBWAY for s in stops)
        assert stops[0].auxiliary == "서울 2호선"
        assert stops[1].auxiliary == "신분당선"
        assert stops[0].coordinate == Coordinate()

    def test_single_item_object(self):
        raw = json.dumps(
            {
                "response": {
                    "body": {
                        "items": {
                            "item": {
                                "subwayStationId": "MTRS11133",
                                "subwayStationName": "서울역",
                                "x": "126.97",
                                "y": "37.55",
                            }
                        }
                    }
                }
            }
        )

        stops = normalize(raw, StopKind.SUBWAY)

        assert len(stops) == 1
        assert stops[0].coordinate == Coordinate(x="126.97", y="37.55")
        assert stops[0].auxiliary == ""

    def test_empty_items_string(self):
        # data.go.kr sends "items": "" when nothing matches
        raw = '{"response":{"body":{"items":"","totalCount":0}}}'
        assert normalize(raw, StopKind.SUBWAY) == []

    def test_missing_name_dropped(self):
        raw = json.dumps(
            {
                "response": {
                    "body": {
                        "items": {
                            "item": [
                                {"subwayStationId": "A"},
                                {"subwayStationId": "B", "subwayStationName": "Kept"},
                            ]
                        }
                    }
                }
            }
        )
        assert [s.id for s in normalize(raw, StopKind.SUBWAY)] == ["B"]

    def test_bus_shape_is_not_subway(self, bus_name_response):
        assert normalize(bus_name_response, StopKind.SUBWAY) == []


class TestXml:
    """Legacy XML responses."""

    def test_station_list_blocks_in_document_order(self, bus_xml_response):
        stops = normalize(bus_xml_response, StopKind.BUS)

        assert len(stops) == 2
        assert [s.id for s in stops] == ["100000001", "100000002"]
        assert stops[0].name == "종로2가"
        assert stops[0].auxiliary == "01001"
        assert stops[0].coordinate == Coordinate(x="126.987752", y="37.569808")
        assert stops[0].geodetic == Coordinate(x="198118.6", y="452071.2")
        assert stops[1].geodetic.is_empty()

    def test_tags_are_case_insensitive(self):
        raw = (
            "<ServiceResult><msgBody>"
            "<STATIONLIST><STID>9</STID><StNm>Upper</StNm><TMX>1</TMX></STATIONLIST>"
            "</msgBody></ServiceResult>"
        )

        stops = normalize(raw, StopKind.BUS)

        assert stops[0].id == "9"
        assert stops[0].name == "Upper"
        assert stops[0].coordinate.x == "1"

    def test_first_non_empty_tag_wins(self):
        raw = (
            "<stationList><stId></stId><stId> 7 </stId><stId>8</stId>"
            "<stNm>A</stNm></stationList>"
        )
        assert normalize(raw, StopKind.BUS)[0].id == "7"

    def test_block_without_name_dropped(self):
        raw = (
            "<r><stationList><stId>1</stId></stationList>"
            "<stationList><stId>2</stId><stNm>B</stNm></stationList></r>"
        )
        assert [s.id for s in normalize(raw, StopKind.BUS)] == ["2"]

    def test_subway_xml_items(self):
        raw = (
            "<response><header><resultCode>00</resultCode></header><body><items>"
            "<item><subwayRouteName>서울 1호선</subwayRouteName>"
            "<subwayStationId>MTRS11133</subwayStationId>"
            "<subwayStationName>서울역</subwayStationName></item>"
            "</items></body></response>"
        )

        stops = normalize(raw, StopKind.SUBWAY)

        assert len(stops) == 1
        assert stops[0].name == "서울역"
        assert stops[0].auxiliary == "서울 1호선"

    def test_portal_error_document_yields_empty(self):
        raw = (
            "<OpenAPI_ServiceResponse><cmmMsgHeader>"
            "<errMsg>SERVICE ERROR</errMsg>"
            "<returnAuthMsg>SERVICE_KEY_IS_NOT_REGISTERED_ERROR</returnAuthMsg>"
            "</cmmMsgHeader></OpenAPI_ServiceResponse>"
        )
        assert normalize(raw, StopKind.SUBWAY) == []


class TestMalformedInput:
    """Malformed bodies never raise."""

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "   ",
            "{not json",
            "[]",
            "null",
            '"text"',
            '{"msgBody": "oops"}',
            '{"msgBody": {"other": []}}',
            "<html><body>Service unavailable</body></html>",
        ],
    )
    def test_returns_empty(self, raw):
        assert normalize(raw, StopKind.BUS) == []
        assert normalize(raw, StopKind.SUBWAY) == []

    @pytest.mark.parametrize(
        "raw",
        [
            "[" * 100000 + "]" * 100000,
            '{"msgBody":' * 50000 + "1" + "}" * 50000,
        ],
    )
    def test_deeply_nested_json_returns_empty(self, raw):
        assert normalize(raw, StopKind.BUS) == []
        assert normalize(raw, StopKind.SUBWAY) == []

    def test_repeatable(self, bus_name_response):
        first = normalize(bus_name_response, StopKind.BUS)
        second = normalize(bus_name_response, StopKind.BUS)

        assert first == second
        assert first is not second


class TestHelpers:
    """Normalizer helper functions."""

    def test_detect_format_by_shape(self):
        assert detect_format("<a/>") == "xml"
        assert detect_format("  {}") == "json"
        assert detect_format("[]", "text/xml") == "json"

    def test_detect_format_by_content_type(self):
        assert detect_format("garbage", "text/xml;charset=UTF-8") == "xml"
        assert detect_format("garbage", "application/json") == "json"
        assert detect_format("garbage") == "json"

    def test_as_item_list(self):
        assert as_item_list(None) == []
        assert as_item_list("") == []
        assert as_item_list({"a": 1}) == [{"a": 1}]
        assert as_item_list([1, 2]) == [1, 2]

    def test_first_present(self):
        item = {"a": "", "b": None, "c": "x", "d": "y"}
        assert first_present(item, ("a", "b", "c", "d")) == "x"
        assert first_present(item, ("missing",)) == ""
        assert first_present({"a": {"nested": 1}}, ("a",)) == ""
