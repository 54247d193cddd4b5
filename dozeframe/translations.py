"""
Translation tables for Dozeframe
User-facing strings in English and Chinese
"""

from PyQt6.QtCore import QSettings

SETTINGS_ORG = 'Dozeframe'
SETTINGS_APP = 'Settings'

TRANSLATIONS = {
    'en': {
        'app_title': 'Dozeframe',

        # Session status
        'no_photos': 'No photos available for this orientation.',
        'no_photos_in_dirs': 'No supported photos found in the selected folders.',
        'battery_unplugged': 'Device unplugged. Slideshow stopped.',
        'battery_low': 'Battery too low ({}%). Slideshow stopped to preserve battery.',
        'battery_issue': 'Battery issue detected. Slideshow stopped.',

        # Overlays
        'paused': 'Paused',
        'brightness_percent': '{}%',
        'hint_tap': 'Tap to pause',
        'hint_double_tap': 'Double tap to exit',
        'hint_swipe': 'Swipe for next or previous',
        'hint_brightness': 'Drag up or down on the right for brightness',
    },
    'zh': {
        'app_title': 'Dozeframe',

        'no_photos': '当前方向没有可显示的照片。',
        'no_photos_in_dirs': '所选文件夹中没有支持的照片。',
        'battery_unplugged': '设备已断开电源，幻灯片已停止。',
        'battery_low': '电量过低（{}%），为节省电量已停止幻灯片。',
        'battery_issue': '检测到电池问题，幻灯片已停止。',

        'paused': '暂停',
        'brightness_percent': '{}%',
        'hint_tap': '轻点暂停',
        'hint_double_tap': '双击退出',
        'hint_swipe': '左右滑动切换照片',
        'hint_brightness': '在右侧上下拖动调节亮度',
    }
}

_current_language = 'en'


def init_language():
    """Initialize language from settings"""
    global _current_language
    settings = QSettings(SETTINGS_ORG, SETTINGS_APP)
    language = settings.value('language', 'en')
    _current_language = language if language in TRANSLATIONS else 'en'


def get_language():
    """Get current language code"""
    return _current_language


def set_language(lang_code):
    """Set current language and save to settings"""
    global _current_language
    if lang_code in TRANSLATIONS:
        _current_language = lang_code
        settings = QSettings(SETTINGS_ORG, SETTINGS_APP)
        settings.setValue('language', lang_code)


def tr(key):
    """Translate a key to current language"""
    return TRANSLATIONS.get(_current_language, {}).get(key, key)


def format_tr(key, *args, **kwargs):
    """Translate and format a string"""
    translated = tr(key)
    if args:
        return translated.format(*args)
    elif kwargs:
        return translated.format(**kwargs)
    return translated
