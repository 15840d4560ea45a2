import growattServer
import pytest

from pygrowatt.aggregator import UNNAMED_PLANT, parse_plant, parse_plant_listing
from pygrowatt.auth import Credential, hash_password, mask
from pygrowatt.devices import Device, DeviceType, extract_power, parse_devices, strategies_for
from pygrowatt.result import OFFLINE, ONLINE


def test_hash_password_known_value():
    # md5("123456") = e10adc3949ba59abbe56e057f20f883e
    assert hash_password("123456") == "e1cadc3949ba59abbe56e057f2cf883e"

def test_hash_password_no_zero_at_even_index():
    for secret in ("123456", "password", "Growatt!2024", ""):
        digest = hash_password(secret)
        assert len(digest) == 32
        assert digest == digest.lower()
        assert all(digest[i] != '0' for i in range(0, 32, 2))

def test_mask_token():
    assert mask("abcdef123456") == "***3456"
    assert mask("") == "null"
    assert mask(None) == "null"

def test_credential_truthiness_and_repr():
    assert Credential("user", "secret")
    assert not Credential("", "secret")
    assert not Credential("user", "")
    assert "secret" not in repr(Credential("user", "secret"))

def test_device_type_from_tag():
    assert DeviceType.from_tag("storage") is DeviceType.HYBRID
    assert DeviceType.from_tag("MIX") is DeviceType.HYBRID
    assert DeviceType.from_tag("tlx") is DeviceType.STRING
    assert DeviceType.from_tag(" inverter ") is DeviceType.STRING
    assert DeviceType.from_tag("micro") is DeviceType.MICRO
    assert DeviceType.from_tag("max") is DeviceType.CENTRAL
    assert DeviceType.from_tag("toaster") is DeviceType.GENERIC
    assert DeviceType.from_tag(None) is DeviceType.GENERIC

def test_every_known_type_has_specific_strategies():
    for device_type in DeviceType:
        if device_type is DeviceType.GENERIC:
            assert strategies_for(device_type) == ()
        else:
            assert len(strategies_for(device_type)) >= 1

def test_extract_power_field_order():
    # direct power wins over AC output
    assert extract_power({'power': 2.0, 'pac': 5000}) == pytest.approx(2.0)
    # zero fields are skipped
    assert extract_power({'power': 0, 'pac': 1454.5}) == pytest.approx(1.4545)

def test_extract_power_nested():
    assert extract_power({'back': {'success': True, 'data': {'ppv': '3.1 kW'}}}) == pytest.approx(3.1)
    assert extract_power({'result': 1, 'obj': {'pac': '800W'}}) == pytest.approx(0.8)
    assert extract_power([{'currentPower': 4.4}]) == pytest.approx(4.4)

def test_extract_power_nothing_usable():
    assert extract_power({'back': {'success': True}}) == 0
    assert extract_power({'pac': 'n/a'}) == 0
    assert extract_power(None) == 0

def test_parse_devices_shapes():
    payload = {'back': {'deviceList': [{'deviceSn': 'SN1', 'deviceType': 'tlx'},
                                       {'sn': 'SN2', 'type': 'storage'},
                                       {'nothing': True}]}}
    assert parse_devices(payload) == [Device('SN1', DeviceType.STRING, 'tlx'),
                                      Device('SN2', DeviceType.HYBRID, 'storage')]
    assert parse_devices({'obj': {'datas': [{'serialNum': 'M1', 'deviceType': 'micro'}]}}) == \
        [Device('M1', DeviceType.MICRO, 'micro')]
    assert parse_devices([{'deviceSn': 'X1'}]) == [Device('X1', DeviceType.GENERIC, '')]
    assert parse_devices({'back': {'success': True}}) == []

def test_parse_plant_defaults():
    plant = parse_plant({'plantId': 1234, 'todayEnergy': '5.2 kWh', 'totalEnergy': '3.1 MWh', 'status': '1'})
    assert plant.plant_id == '1234'
    assert plant.name == UNNAMED_PLANT
    assert plant.today_energy == pytest.approx(5.2)
    assert plant.total_energy == pytest.approx(3100.0)
    assert plant.status == ONLINE
    assert parse_plant({'id': 'p2', 'plantName': 'Roof', 'status': 0}).status == OFFLINE
    assert parse_plant({'plantName': 'no id'}) is None
    assert parse_plant("junk") is None

def test_parse_plant_listing_token_api():
    payload = {'back': {'success': True,
                        'data': [{'plantId': '1', 'plantName': 'Home', 'totalEnergy': '10'}, 'junk'],
                        'totalData': {'todayEnergySum': '2.5', 'totalEnergySum': '1.2 MWh', 'CO2Sum': '0.9'}}}
    listing = parse_plant_listing(payload)
    assert [plant.plant_id for plant in listing.plants] == ['1']
    assert listing.totals == {'today': pytest.approx(2.5), 'total': pytest.approx(1200.0), 'power': 0}
    assert listing.co2 == pytest.approx(0.9)

def test_parse_plant_listing_other_shapes():
    assert len(parse_plant_listing({'obj': {'datas': [{'id': 'a'}, {'id': 'b'}]}}).plants) == 2
    assert len(parse_plant_listing([{'id': 'a'}]).plants) == 1
    assert parse_plant_listing({'PlantList': []}).plants == []
    assert parse_plant_listing({'msg': 'nothing'}) is None

def test_hash_password_matches_growatt_server():
    for secret in ("123456", "Growatt!2024"):
        assert hash_password(secret) == growattServer.hash_password(secret)

def test_parse_plant_live_power():
    assert parse_plant({'plantId': '1', 'currentPower': '2.5 kW'}).current_power == pytest.approx(2.5)
    assert parse_plant({'plantId': '1', 'pac': 1800}).current_power == pytest.approx(1.8)
    assert parse_plant({'plantId': '1', 'power': 'n/a'}).current_power == 0

def test_parse_plant_listing_account_power():
    listing = parse_plant_listing({'back': {'data': [], 'totalData': {'currentPowerSum': '4.2 kW'}}})
    assert listing.totals['power'] == pytest.approx(4.2)
    listing = parse_plant_listing({'back': {'data': [], 'totalData': {'pSum': 3300}}})
    assert listing.totals['power'] == pytest.approx(3.3)
