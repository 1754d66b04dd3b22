"""
Asset tables for the three generated headers.

Each page is listed in the order its symbol is emitted. The mangles leave
%CSS%, %SCSS%, %DMXMENU%, %MSG% and %DMXVARS% in place; the firmware fills
them in when the page is served.
"""

import re

from asset_packer.specs import AssetSpec, Method

SOURCE_DIR = "wled00/data"
MAIN_PAGE = "index.htm"
HTML_UI_HEADER = "html_ui.h"
HTML_SETTINGS_HEADER = "html_settings.h"
HTML_OTHER_HEADER = "html_other.h"

DMX_FLAG = "WLED_ENABLE_DMX"
RAW_PREPEND = "=====("
RAW_APPEND = ")====="

_STYLESHEET_LINK_RE = re.compile(r'<link rel="?stylesheet"?[^>]*>', re.S | re.M)
_STYLE_BLOCK_RE = re.compile(r"<style>.*</style>", re.S | re.M)
_GET_V_RE = re.compile(r"function GetV.*</script>", re.S | re.M)
_UI_BUTTON_RE = re.compile(r"User Interface</button></form>", re.S | re.M)
_USERMOD_FETCH_RE = re.compile(r'fetch\("http://.*/win', re.S | re.M)
_MSG_BODY_RE = re.compile(r"<h2>.*</body>", re.S | re.M)
_FM_RE = re.compile(r"function FM\(\)[ ]?\{", re.S | re.M)


def dmx_guard(name, chunk):
    """Compile chunk only in DMX builds, else an empty string of the same name."""
    return (
        f"\n#ifdef {DMX_FLAG}\n"
        f"{chunk}\n"
        f"#else\n"
        f'const char {name}[] PROGMEM = R"{RAW_PREPEND}{RAW_APPEND}";\n'
        f"#endif\n"
    )


def settings_template(get_v_prefix="function GetV() {var d=document;\n"):
    """Mangle for settings pages: styles become %CSS%%SCSS% and GetV() is cut
    open so the firmware can append the current values."""

    def mangle(chunk):
        chunk = _STYLESHEET_LINK_RE.sub("", chunk)
        chunk = _STYLE_BLOCK_RE.sub("%CSS%%SCSS%", chunk)
        return _GET_V_RE.sub(lambda m: get_v_prefix, chunk)

    return mangle


def settings_main(chunk):
    # only the first percent sign needs escaping for the template processor
    chunk = chunk.replace("%", "%%", 1)
    return _UI_BUTTON_RE.sub("User Interface</button></form>%DMXMENU%", chunk)


def settings_dmx(chunk):
    return dmx_guard("PAGE_settings_dmx", settings_template()(chunk))


def usermod(chunk):
    return _USERMOD_FETCH_RE.sub('fetch("/win', chunk)


def msg(chunk):
    return _MSG_BODY_RE.sub("<h2>%MSG%</body>", chunk)


def dmxmap(chunk):
    return dmx_guard("PAGE_dmxmap", _FM_RE.sub("function FM() {%DMXVARS%\n", chunk))


def _page(file, name, mangle=None):
    return AssetSpec(
        file=file,
        name=name,
        method=Method.PLAINTEXT,
        prepend=RAW_PREPEND,
        append=RAW_APPEND,
        filter="markup-minify",
        mangle=mangle,
    )


SETTINGS_SPECS = [
    AssetSpec(
        file="style.css",
        name="PAGE_settingsCss",
        method=Method.PLAINTEXT,
        prepend="=====(<style>",
        append="</style>)=====",
        filter="style-minify",
    ),
    _page("settings.htm", "PAGE_settings", settings_main),
    _page("settings_wifi.htm", "PAGE_settings_wifi", settings_template()),
    _page("settings_leds.htm", "PAGE_settings_leds", settings_template()),
    _page("settings_dmx.htm", "PAGE_settings_dmx", settings_dmx),
    _page("settings_ui.htm", "PAGE_settings_ui", settings_template()),
    _page("settings_sync.htm", "PAGE_settings_sync", settings_template("function GetV() {\n")),
    _page("settings_time.htm", "PAGE_settings_time", settings_template("function GetV() {\n")),
    _page("settings_sec.htm", "PAGE_settings_sec", settings_template()),
]

OTHER_SPECS = [
    _page("usermod.htm", "PAGE_usermod", usermod),
    _page("msg.htm", "PAGE_msg", msg),
    _page("dmxmap.htm", "PAGE_dmxmap", dmxmap),
    _page("update.htm", "PAGE_update"),
    _page("welcome.htm", "PAGE_welcome"),
    _page("liveview.htm", "PAGE_liveview"),
    AssetSpec(file="favicon.ico", name="favicon", method=Method.BINARY),
]
