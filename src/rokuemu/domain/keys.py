from enum import Enum


class RokuKey(str, Enum):
    HOME = "Home"
    REV = "Rev"
    FWD = "Fwd"
    PLAY = "Play"
    SELECT = "Select"
    LEFT = "Left"
    RIGHT = "Right"
    DOWN = "Down"
    UP = "Up"
    BACK = "Back"
    INSTANT_REPLAY = "InstantReplay"
    INFO = "Info"
    BACKSPACE = "Backspace"
    SEARCH = "Search"
    ENTER = "Enter"
    FIND_REMOTE = "FindRemote"
    VOLUME_DOWN = "VolumeDown"
    VOLUME_MUTE = "VolumeMute"
    VOLUME_UP = "VolumeUp"
    POWER_OFF = "PowerOff"
    CHANNEL_UP = "ChannelUp"
    CHANNEL_DOWN = "ChannelDown"
    INPUT_TUNER = "InputTuner"
    INPUT_HDMI1 = "InputHDMI1"
    INPUT_HDMI2 = "InputHDMI2"
    INPUT_HDMI3 = "InputHDMI3"
    INPUT_HDMI4 = "InputHDMI4"
    INPUT_AV1 = "InputAV1"


_BY_VALUE = {k.value.lower(): k for k in RokuKey}


def lookup_key(name: str) -> RokuKey | None:
    # ECP also sends "Lit_<char>" for literal text input; those stay unknown.
    return _BY_VALUE.get(name.strip().lower())
