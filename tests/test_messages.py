import json

import pytest

from buttplug_client.core.exceptions import MessageDecodeError
from buttplug_client.models import messages as msgs


def test_to_json_renders_single_envelope() -> None:
    message = msgs.RequestServerInfo("My App", id=3)

    assert json.loads(message.to_json()) == {
        "RequestServerInfo": {"Id": 3, "ClientName": "My App", "MessageVersion": 1}
    }


def test_error_code_is_rendered_as_number() -> None:
    message = msgs.Error("bad", msgs.ErrorClass.ERROR_MSG, id=9)

    assert json.loads(message.to_json()) == {
        "Error": {"Id": 9, "ErrorMessage": "bad", "ErrorCode": 3}
    }


def test_from_json_decodes_frame_in_order() -> None:
    text = json.dumps([
        {"Ok": {"Id": 1}},
        {"ServerInfo": {"Id": 2, "ServerName": "Intiface", "MessageVersion": 1,
                        "MaxPingTime": 500, "MajorVersion": 0, "MinorVersion": 5, "BuildVersion": 0}},
        {"DeviceList": {"Id": 3, "Devices": [
            {"DeviceIndex": 0, "DeviceName": "Vibe", "DeviceMessages": {"VibrateCmd": {"FeatureCount": 1}}},
        ]}},
    ])

    decoded = msgs.from_json(text)

    assert [m.type_name for m in decoded] == ["Ok", "ServerInfo", "DeviceList"]
    assert decoded[1].max_ping_time == 500
    assert decoded[2].devices == [msgs.DeviceInfo(0, "Vibe", {"VibrateCmd": {"FeatureCount": 1}})]


def test_error_decodes_code_to_error_class() -> None:
    decoded = msgs.from_json('[{"Error": {"Id": 0, "ErrorMessage": "nope", "ErrorCode": 4}}]')

    assert decoded[0].error_code is msgs.ErrorClass.ERROR_DEVICE
    assert decoded[0].is_system_message


@pytest.mark.parametrize("text", [
    "not json",
    '{"Ok": {"Id": 1}}',
    "[]",
    '[{"Vibrate": {"Id": 1}}]',
    '[{"Ok": {}}]',
    '[{"Test": {"Id": 1}}]',
    '[{"Ok": {"Id": 1}, "Ping": {"Id": 2}}]',
    '[{"Error": {"Id": 1, "ErrorMessage": "x", "ErrorCode": 99}}]',
    '[{"DeviceList": {"Id": 1, "Devices": [{"DeviceName": "no index"}]}}]',
])
def test_malformed_frames_raise_decode_error(text) -> None:
    with pytest.raises(MessageDecodeError):
        msgs.from_json(text)
