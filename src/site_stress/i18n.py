"""
Internationalization (i18n) module for the site stress system.

Provides translations for all operator-facing messages in English (en)
and Dutch (nl).
"""

from typing import Optional


# Supported languages
SUPPORTED_LANGUAGES = frozenset({"en", "nl"})
DEFAULT_LANGUAGE = "en"


# Translation dictionary with all messages
# Structure: {message_key: {language_code: translated_message}}
TRANSLATIONS: dict[str, dict[str, str]] = {
    # CLI
    "cli.banner": {
        "en": "SiteStress v{version} - HTTP load test tool",
        "nl": "SiteStress v{version} - HTTP loadtest tool",
    },
    "cli.platform": {
        "en": "Version: {version} | Platform: {platform}",
        "nl": "Versie: {version} | Platform: {platform}",
    },
    "cli.authorization_warning": {
        "en": "⚠️  WARNING: Only use this against systems you are authorized to test.",
        "nl": "⚠️  WAARSCHUWING: Gebruik dit alleen op systemen waar je toestemming voor hebt.",
    },
    "cli.simulation": {
        "en": "🧪 Simulation mode: no real network requests are made.",
        "nl": "🧪 Simulatiemodus: er worden geen echte netwerkverzoeken gedaan.",
    },
    "cli.config_error": {
        "en": "Configuration error: {error}",
        "nl": "Configuratiefout: {error}",
    },
    "cli.validation_error": {
        "en": "Invalid domain: {error}",
        "nl": "Ongeldig domein: {error}",
    },

    # Target resolution
    "resolver.initial_check": {
        "en": "🔍 Initial check for {domain}...",
        "nl": "🔍 Initiele check voor {domain}...",
    },
    "resolver.addresses": {
        "en": "📍 IPs: {addresses}",
        "nl": "📍 IPs: {addresses}",
    },
    "resolver.no_addresses": {
        "en": "⚠️  No IP addresses found for {domain}, trying anyway.",
        "nl": "⚠️  Geen IP adressen gevonden voor {domain}, we proberen het toch.",
    },
    "resolver.target": {
        "en": "🎯 Target: {url}",
        "nl": "🎯 Target: {url}",
    },
    "resolver.fallback": {
        "en": "⚠️  No scheme answered for {domain}, falling back to {url}.",
        "nl": "⚠️  Geen enkel schema reageerde voor {domain}, we gebruiken {url}.",
    },
    "probe.reachable": {
        "en": "reachable",
        "nl": "bereikbaar",
    },
    "probe.unreachable": {
        "en": "unreachable ({error})",
        "nl": "onbereikbaar ({error})",
    },

    # Run lifecycle
    "run.starting": {
        "en": "🚀 Starting load test ({workers} workers per domain)...",
        "nl": "🚀 Starten loadtest ({workers} workers per domein)...",
    },
    "run.total_time": {
        "en": "⏱️  Total time: {duration}",
        "nl": "⏱️  Totale tijd: {duration}",
    },
    "run.time_up": {
        "en": "🛑 Time is up. Waiting for workers (this can take a moment)...",
        "nl": "🛑 Tijd is om. Wachten op workers (kan even duren)...",
    },

    # Availability transitions
    "transition.down": {
        "en": "[{time}] 💥 {domain} is DOWN ({reason})!",
        "nl": "[{time}] 💥 {domain} is DOWN ({reason})!",
    },
    "transition.up": {
        "en": "[{time}] ✅ {domain} is back ONLINE (was down {downtime}).",
        "nl": "[{time}] ✅ {domain} is weer ONLINE (was {downtime} plat).",
    },
    "reason.status": {
        "en": "status {code}",
        "nl": "status {code}",
    },
    "reason.timeout": {
        "en": "timeout",
        "nl": "time-out",
    },
    "reason.connection_error": {
        "en": "connection error",
        "nl": "verbindingsfout",
    },

    # Monitor
    "monitor.summary": {
        "en": "⏳ Remaining: {remaining} | RPS: {rps}",
        "nl": "⏳ Nog: {remaining} | RPS: {rps}",
    },
    "monitor.domain": {
        "en": "{domain}: {status} ({failures} fail)",
        "nl": "{domain}: {status} ({failures} fail)",
    },

    # Report
    "report.results_header": {
        "en": "📊 FINAL RESULTS",
        "nl": "📊 EINDRESULTATEN",
    },
    "report.title": {
        "en": "SITESTRESS REPORT - {timestamp}",
        "nl": "SITESTRESS RAPPORT - {timestamp}",
    },
    "report.duration": {
        "en": "Test duration: {duration}",
        "nl": "Duur test: {duration}",
    },
    "report.domain": {
        "en": "DOMAIN: {domain}",
        "nl": "DOMEIN: {domain}",
    },
    "report.target": {
        "en": "   Target:          {url}",
        "nl": "   Target:          {url}",
    },
    "report.resolution_note": {
        "en": "   Note: initial probe failed ({error}), fallback URL used",
        "nl": "   Let op: initiele check mislukt ({error}), fallback URL gebruikt",
    },
    "report.total": {
        "en": "   Requests total:  {count}",
        "nl": "   Requests Totaal: {count}",
    },
    "report.success": {
        "en": "   Succeeded (up):  {count}",
        "nl": "   Geslaagd (Up):   {count}",
    },
    "report.failure": {
        "en": "   Failed (down):   {count}",
        "nl": "   Gefaald (Down):  {count}",
    },
    "report.log": {
        "en": "   Log:",
        "nl": "   Logboek:",
    },
    "report.no_events": {
        "en": "   (No downtime events recorded)",
        "nl": "   (Geen downtime events geregistreerd)",
    },
    "report.saved": {
        "en": "💾 Report saved to: {path}",
        "nl": "💾 Rapport opgeslagen in: {path}",
    },
    "report.save_failed": {
        "en": "⚠️  Could not save report: {error}",
        "nl": "⚠️  Kon rapport niet opslaan: {error}",
    },
}


def get_message(
    key: str,
    language: Optional[str] = None,
    **kwargs,
) -> str:
    """
    Get a translated message by key.

    Args:
        key: The message key (e.g., 'report.no_events')
        language: Language code ('en' or 'nl'). Defaults to DEFAULT_LANGUAGE.
        **kwargs: Format arguments for the message template

    Returns:
        The translated and formatted message string.
        If the key is not found, returns the key itself.
        If the language is not found, falls back to DEFAULT_LANGUAGE.

    Examples:
        >>> get_message('reason.timeout', 'nl')
        'time-out'
        >>> get_message('report.domain', 'en', domain='example.com')
        'DOMAIN: example.com'
    """
    if language is None or language not in SUPPORTED_LANGUAGES:
        language = DEFAULT_LANGUAGE

    translations = TRANSLATIONS.get(key)
    if translations is None:
        return key

    message = translations.get(language)
    if message is None:
        message = translations.get(DEFAULT_LANGUAGE)
    if message is None:
        return key

    if kwargs:
        try:
            message = message.format(**kwargs)
        except KeyError:
            # Leave the template unformatted
            pass

    return message


def describe_reason(reason: Optional[str], language: Optional[str] = None) -> str:
    """Translate a DOWN reason such as 'status 503' or 'connection error'."""
    if not reason:
        return get_message("reason.connection_error", language)
    if reason.startswith("status "):
        return get_message("reason.status", language, code=reason[len("status "):])
    key = "reason." + reason.replace(" ", "_")
    if key in TRANSLATIONS:
        return get_message(key, language)
    return reason


def get_all_message_keys() -> set[str]:
    """Get all available message keys."""
    return set(TRANSLATIONS.keys())


def has_translation(key: str, language: str) -> bool:
    """Check if a translation exists for a key and language."""
    translations = TRANSLATIONS.get(key)
    if translations is None:
        return False
    return language in translations


def get_missing_translations(language: str) -> set[str]:
    """
    Get all message keys that are missing translations for a language.

    Args:
        language: The language code to check

    Returns:
        Set of message keys missing translations for the specified language.
    """
    missing = set()
    for key, translations in TRANSLATIONS.items():
        if language not in translations:
            missing.add(key)
    return missing


def validate_translations() -> dict[str, set[str]]:
    """
    Validate that all languages have all translations.

    Returns:
        Dictionary mapping language codes to sets of missing message keys.
        Empty sets indicate complete translations.
    """
    return {language: get_missing_translations(language) for language in SUPPORTED_LANGUAGES}
