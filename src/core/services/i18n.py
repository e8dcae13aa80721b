"""
Translations — UI strings and labels keyed by logical name.

    translate("pricing.freemium", "ar")  →  "مجاني + مدفوع"

Unknown Arabic keys fall back to English; unknown keys come back as the
key itself so a missing string is visible instead of blank.
"""

from __future__ import annotations

LANGUAGES: tuple[str, ...] = ("en", "ar")
DEFAULT_LANGUAGE = "en"

_STRINGS: dict[str, dict[str, str]] = {
    "en": {
        # Groups
        "group.online": "Online Tools",
        "group.desktop": "Desktop Apps",
        "group.mobile": "Mobile Apps",
        "group.extensions": "Browser Extensions",
        # Pricing
        "pricing.free": "Free",
        "pricing.freemium": "Free + Paid",
        "pricing.paid": "Paid",
        # Badges
        "badge.popular": "Popular",
        "badge.new": "New",
        "badge.premium": "Premium",
        "badge.trending": "Trending",
        # Actions
        "action.visit": "Visit",
        "action.search": "Search tools...",
        "action.all": "All",
        "action.add": "Add New Tool",
        "action.edit": "Edit",
        "action.delete": "Delete",
        "action.save": "Save",
        "action.cancel": "Cancel",
        "action.sync": "Sync now",
        "action.pull": "Reload from GitHub",
        "action.export": "Export",
        "action.import": "Import",
        "action.detect": "Detect repository",
        "action.switch_language": "العربية",
        # Status
        "status.connected": "Connected",
        "status.disconnected": "Not Connected",
        "status.unsaved": "Unsaved changes",
        "status.synced": "All changes synced",
        "status.no_tools": "No tools found in this section",
        "status.no_match": "No tools found matching",
        # Admin
        "admin.title": "Admin Panel",
        "admin.delete_confirm": "Are you sure you want to delete",
        "admin.import_confirm": "This will replace all current data. Continue?",
        "admin.remember": "Remember me",
        "admin.settings": "GitHub Settings",
        "admin.owner": "Owner",
        "admin.repo": "Repository",
        "admin.token": "Token",
        "admin.branch": "Branch",
        "admin.path": "Data file",
        "admin.force": "Overwrite / discard (force)",
        "admin.pending": "Staged changes",
        "admin.disconnect": "Disconnect",
        "admin.view_site": "View site",
        # Form
        "form.name": "Tool name",
        "form.url": "URL",
        "form.description_en": "Description (English)",
        "form.description_ar": "Description (Arabic)",
        "form.section": "Section",
        "form.category": "Category",
        "form.pricing": "Pricing",
        "form.badge": "Badge",
        "form.icon_class": "Icon class",
        "form.icon_gradient": "Icon gradient",
        "form.features_en": "Features (English, comma separated)",
        "form.features_ar": "Features (Arabic, comma separated)",
        "form.platforms": "Platforms",
        # Site
        "site.stats": "Tools listed",
    },
    "ar": {
        "group.online": "أدوات أونلاين",
        "group.desktop": "تطبيقات سطح المكتب",
        "group.mobile": "تطبيقات الجوال",
        "group.extensions": "إضافات المتصفح",
        "pricing.free": "مجاني",
        "pricing.freemium": "مجاني + مدفوع",
        "pricing.paid": "مدفوع",
        "badge.popular": "شائع",
        "badge.new": "جديد",
        "badge.premium": "مميز",
        "badge.trending": "رائج",
        "action.visit": "زيارة",
        "action.search": "ابحث عن الأدوات...",
        "action.all": "الكل",
        "action.add": "إضافة أداة جديدة",
        "action.edit": "تعديل",
        "action.delete": "حذف",
        "action.save": "حفظ",
        "action.cancel": "إلغاء",
        "action.sync": "مزامنة الآن",
        "action.pull": "إعادة التحميل من GitHub",
        "action.export": "تصدير",
        "action.import": "استيراد",
        "action.detect": "اكتشاف المستودع",
        "action.switch_language": "English",
        "status.connected": "متصل",
        "status.disconnected": "غير متصل",
        "status.unsaved": "تغييرات غير محفوظة",
        "status.synced": "تمت مزامنة جميع التغييرات",
        "status.no_tools": "لا توجد أدوات في هذا القسم",
        "status.no_match": "لا توجد أدوات مطابقة لـ",
        "admin.title": "لوحة التحكم",
        "admin.delete_confirm": "هل أنت متأكد من حذف",
        "admin.import_confirm": "سيؤدي هذا إلى استبدال جميع البيانات الحالية. هل تريد المتابعة؟",
        "admin.remember": "تذكرني",
        "admin.settings": "إعدادات GitHub",
        "admin.owner": "المالك",
        "admin.repo": "المستودع",
        "admin.token": "الرمز",
        "admin.branch": "الفرع",
        "admin.path": "ملف البيانات",
        "admin.force": "استبدال / تجاهل (إجباري)",
        "admin.pending": "تغييرات بانتظار المزامنة",
        "admin.disconnect": "قطع الاتصال",
        "admin.view_site": "عرض الموقع",
        "form.name": "اسم الأداة",
        "form.url": "الرابط",
        "form.description_en": "الوصف (إنجليزي)",
        "form.description_ar": "الوصف (عربي)",
        "form.section": "القسم",
        "form.category": "التصنيف",
        "form.pricing": "التسعير",
        "form.badge": "الشارة",
        "form.icon_class": "فئة الأيقونة",
        "form.icon_gradient": "تدرج الأيقونة",
        "form.features_en": "المميزات (إنجليزي، مفصولة بفواصل)",
        "form.features_ar": "المميزات (عربي، مفصولة بفواصل)",
        "form.platforms": "المنصات",
        "site.stats": "أداة مدرجة",
    },
}

# Font Awesome classes per platform
PLATFORM_ICONS: dict[str, str] = {
    "windows": "fab fa-windows",
    "mac": "fab fa-apple",
    "linux": "fab fa-linux",
    "android": "fab fa-android",
    "ios": "fab fa-apple",
}
_DEFAULT_PLATFORM_ICON = "fas fa-desktop"


def normalize_language(lang: str | None) -> str:
    """Coerce anything unknown to the default language."""
    return lang if lang in LANGUAGES else DEFAULT_LANGUAGE


def translate(key: str, lang: str) -> str:
    lang = normalize_language(lang)
    value = _STRINGS[lang].get(key)
    if value is None and lang != DEFAULT_LANGUAGE:
        value = _STRINGS[DEFAULT_LANGUAGE].get(key)
    return value if value is not None else key


def label(prefix: str, value: str | None, lang: str) -> str:
    """Translate an enumerated value, echoing it back when unknown.

    ``label("badge", "Popular", "ar")`` → ``"شائع"``.
    """
    if not value:
        return ""
    key = f"{prefix}.{value.lower()}"
    text = translate(key, lang)
    return value if text == key else text


def direction(lang: str) -> str:
    """Text direction for a language."""
    return "rtl" if normalize_language(lang) == "ar" else "ltr"


def platform_icon(platform: str) -> str:
    return PLATFORM_ICONS.get(platform.lower(), _DEFAULT_PLATFORM_ICON)


def strings(lang: str) -> dict[str, str]:
    """Full table for a language (English-filled), for template injection."""
    lang = normalize_language(lang)
    merged = dict(_STRINGS[DEFAULT_LANGUAGE])
    merged.update(_STRINGS[lang])
    return merged
