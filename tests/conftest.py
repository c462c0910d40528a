"""Test configuration and fixtures."""

import json

import pytest

from kr_transit_search.core.config import TransitSettings


@pytest.fixture
def settings():
    """Settings with a fake key and no retries."""
    return TransitSettings(service_key="test-key/with+chars==", retry_attempts=1)


@pytest.fixture
def bus_name_response():
    """Bus registry name-search response (stId/stNm variant)."""
    return json.dumps(
        {
            "comMsgHeader": {"errMsg": None, "returnCode": None},
            "msgHeader": {"headerCd": "0", "headerMsg": "정상적으로 처리되었습니다."},
            "msgBody": {
                "itemList": [
                    {
                        "stId": "121000012",
                        "stNm": "강남역",
                        "tmX": "127.0281",
                        "tmY": "37.4979",
                        "arsId": "22009",
                        "posX": "202614.6",
                        "posY": "444086.1",
                    },
                    {
                        "stId": "121000013",
                        "stNm": "강남역.강남대로",
                        "tmX": "127.0275",
                        "tmY": "37.4985",
                        "arsId": "22010",
                        "posX": "202560.2",
                        "posY": "444152.4",
                    },
                ]
            },
        },
        ensure_ascii=False,
    )


@pytest.fixture
def bus_location_response():
    """Bus registry location-search response (stationId/gpsX variant)."""
    return json.dumps(
        {
            "msgHeader": {"headerCd": "0", "headerMsg": "정상적으로 처리되었습니다."},
            "msgBody": {
                "itemList": {
                    "stationId": "100000001",
                    "stationNm": "종로2가",
                    "gpsX": "126.987752",
                    "gpsY": "37.569808",
                    "arsId": "01001",
                }
            },
        },
        ensure_ascii=False,
    )


@pytest.fixture
def subway_name_response():
    """Subway registry keyword-search response."""
    return json.dumps(
        {
            "response": {
                "header": {"resultCode": "00", "resultMsg": "NORMAL SERVICE."},
                "body": {
                    "items": {
                        "item": [
                            {
                                "subwayRouteName": "서울 2호선",
                                "subwayStationId": "MTRS12222",
                                "subwayStationName": "강남",
                            },
                            {
                                "subwayRouteName": "신분당선",
                                "subwayStationId": "MTRDX4D1",
                                "subwayStationName": "강남",
                            },
                        ]
                    },
                    "numOfRows": 100,
                    "pageNo": 1,
                    "totalCount": 2,
                },
            }
        },
        ensure_ascii=False,
    )


@pytest.fixture
def bus_xml_response():
    """Legacy XML bus response with repeated stationList blocks."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<ServiceResult>
  <msgHeader><headerCd>0</headerCd></msgHeader>
  <msgBody>
    <stationList>
      <arsId>01001</arsId>
      <posX>198118.6</posX>
      <posY>452071.2</posY>
      <stId>100000001</stId>
      <stNm> 종로2가 </stNm>
      <tmX>126.987752</tmX>
      <tmY>37.569808</tmY>
    </stationList>
    <stationList>
      <arsId>01002</arsId>
      <stId>100000002</stId>
      <stNm>종로1가</stNm>
      <tmX>126.982</tmX>
      <tmY>37.5702</tmY>
    </stationList>
  </msgBody>
</ServiceResult>
"""
