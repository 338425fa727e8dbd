import base64
from xml.sax.saxutils import escape

APP_PLACEHOLDER_ICON = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mP8Xw8AAoMBgDTD2qgAAAAASUVORK5CYII="
)

_INFO_TEMPLATE = """<?xml version="1.0" encoding="UTF-8" ?>
<root xmlns="urn:schemas-upnp-org:device-1-0">
  <specVersion>
    <major>1</major>
    <minor>0</minor>
  </specVersion>
  <device>
  <deviceType>urn:roku-com:device:player:1-0</deviceType>
  <friendlyName>{usn}</friendlyName>
  <manufacturer>Roku</manufacturer>
  <manufacturerURL>http://www.roku.com/</manufacturerURL>
  <modelDescription>Emulated Roku</modelDescription>
  <modelName>Roku 4</modelName>
  <modelNumber>4400x</modelNumber>
  <modelURL>http://www.roku.com/</modelURL>
  <serialNumber>{usn}</serialNumber>
  <UDN>uuid:{uuid}</UDN>
  </device>
</root>
"""

_DEVICE_INFO_TEMPLATE = """<device-info>
  <udn>{uuid}</udn>
  <serial-number>{usn}</serial-number>
  <device-id>{usn}</device-id>
  <vendor-name>Roku</vendor-name>
  <model-number>4400X</model-number>
  <model-name>Roku 4</model-name>
  <model-region>US</model-region>
  <supports-ethernet>true</supports-ethernet>
  <wifi-mac>00:00:00:00:00:00</wifi-mac>
  <ethernet-mac>00:00:00:00:00:00</ethernet-mac>
  <network-type>ethernet</network-type>
  <user-device-name>{usn}</user-device-name>
  <software-version>7.5.0</software-version>
  <software-build>09021</software-build>
  <secure-device>true</secure-device>
  <language>en</language>
  <country>US</country>
  <locale>en_US</locale>
  <time-zone>US/Pacific</time-zone>
  <time-zone-offset>-480</time-zone-offset>
  <power-mode>PowerOn</power-mode>
  <supports-suspend>false</supports-suspend>
  <supports-find-remote>false</supports-find-remote>
  <supports-audio-guide>false</supports-audio-guide>
  <developer-enabled>false</developer-enabled>
  <keyed-developer-id>0000000000000000000000000000000000000000</keyed-developer-id>
  <search-enabled>false</search-enabled>
  <voice-search-enabled>false</voice-search-enabled>
  <notifications-enabled>false</notifications-enabled>
  <notifications-first-use>false</notifications-first-use>
  <supports-private-listening>false</supports-private-listening>
  <headphones-connected>false</headphones-connected>
</device-info>
"""

APPS_TEMPLATE = (
    "<apps>\n"
    + "".join(
        f'  <app id="{i}" version="1.0.0">Emulated App {i}</app>\n' for i in range(1, 11)
    )
    + "</apps>\n"
)

ACTIVE_APP_TEMPLATE = """<active-app>
  <app>Roku</app>
</active-app>
"""


def format_root_info(uuid: str, usn: str) -> str:
    return _INFO_TEMPLATE.format(uuid=escape(uuid), usn=escape(usn))


def format_device_info(uuid: str, usn: str) -> str:
    return _DEVICE_INFO_TEMPLATE.format(uuid=escape(uuid), usn=escape(usn))
