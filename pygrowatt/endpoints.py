# pyGrowatt - Vendor endpoint catalogue
# -*- coding: utf-8 -*-
"""
 Ordered candidate lists for every account and plant level capability.

 Each list runs from the most specific/modern endpoint (token API, no
 session cookies needed) to the least specific (web panel, cookies
 required). Adding or dropping an endpoint generation is a one line change
 here. Per device-type telemetry lists live in pygrowatt.devices next to
 the device type enum.

 Placeholders available to templates:
    {username} {password}   - login only (password is the hashed secret)
    {user_id}               - account id from the login response
    {plant_id} {date}       - plant scoped capabilities
    {serial}                - device scoped capabilities
"""
import enum

from pygrowatt.cascade import API, WEB, Auth, Candidate
from pygrowatt.classifier import Generation


class Capability(enum.Enum):
    PLANT_LIST = "plant-list"
    PLANT_POWER = "plant-power"
    DEVICE_LIST = "device-list"
    DEVICE_GENERIC = "device-generic"
    PLANT_ENERGY = "plant-energy"


# Login generations, tried in this order
LOGIN_TOKEN_API = Candidate(
    name="login-token-api", method="POST", base=API, path="newTwoLoginAPI.do",
    body=(("userName", "{username}"), ("password", "{password}")),
    auth=Auth.NONE, generation=Generation.TOKEN_API)

LOGIN_WEB_PANEL = Candidate(
    name="login-web-panel", method="POST", base=WEB, path="login",
    body=(("account", "{username}"), ("password", "{password}"), ("validateCode", "")),
    auth=Auth.NONE, generation=Generation.WEB_PANEL)

LOGIN_CANDIDATES = (LOGIN_TOKEN_API, LOGIN_WEB_PANEL)


CANDIDATES = {
    Capability.PLANT_LIST: (
        Candidate("plant-list-token", "GET", API, "PlantListAPI.do",
                  generation=Generation.TOKEN_API),
        Candidate("plant-list-user", "GET", API, "PlantListAPI.do",
                  params=(("userId", "{user_id}"),),
                  generation=Generation.TOKEN_API),
        Candidate("plant-list-panel", "POST", WEB, "index/getPlantListTitle",
                  auth=Auth.COOKIE, generation=Generation.WEB_PANEL),
    ),
    Capability.PLANT_POWER: (
        Candidate("plant-detail", "GET", API, "PlantDetailAPI.do",
                  params=(("plantId", "{plant_id}"), ("type", "1")),
                  generation=Generation.TOKEN_API),
        Candidate("plant-user-center", "GET", API, "newTwoPlantAPI.do",
                  params=(("op", "getUserCenterEnertyDataByPlantid"), ("plantId", "{plant_id}")),
                  generation=Generation.GENERIC),
        Candidate("plant-panel-data", "POST", WEB, "panel/getPlantData",
                  params=(("plantId", "{plant_id}"),),
                  auth=Auth.COOKIE, generation=Generation.WEB_PANEL),
    ),
    Capability.DEVICE_LIST: (
        Candidate("device-list-two", "GET", API, "newTwoPlantAPI.do",
                  params=(("op", "getAllDeviceListTwo"), ("plantId", "{plant_id}"),
                          ("pageNum", "1"), ("pageSize", "100")),
                  generation=Generation.GENERIC),
        Candidate("device-list", "GET", API, "newTwoPlantAPI.do",
                  params=(("op", "getAllDeviceList"), ("plantId", "{plant_id}")),
                  generation=Generation.GENERIC),
        Candidate("device-list-panel", "POST", WEB, "panel/getDevicesByPlantList",
                  body=(("plantId", "{plant_id}"), ("currPage", "1")),
                  auth=Auth.COOKIE, generation=Generation.WEB_PANEL),
    ),
    Capability.DEVICE_GENERIC: (
        Candidate("device-data", "GET", API, "newTwoDeviceAPI.do",
                  params=(("op", "getDeviceData"), ("deviceSn", "{serial}"), ("plantId", "{plant_id}")),
                  generation=Generation.GENERIC),
        Candidate("device-info-panel", "POST", WEB, "panel/getDeviceInfo",
                  body=(("plantId", "{plant_id}"), ("deviceSn", "{serial}")),
                  auth=Auth.COOKIE, generation=Generation.WEB_PANEL),
    ),
    Capability.PLANT_ENERGY: (
        Candidate("plant-energy", "GET", API, "PlantEnergyAPI.do",
                  params=(("plantId", "{plant_id}"), ("date", "{date}"), ("type", "1")),
                  generation=Generation.TOKEN_API),
    ),
}
