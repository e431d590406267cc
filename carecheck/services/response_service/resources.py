"""Localized response text and emergency contacts.

Every lookup falls back to English when a language has no entry.
"""
from typing import Dict, List, Optional, Tuple

from carecheck.services.safety_service.config import DEFAULT_LANGUAGE, EmergencyConfig

CRISIS_MESSAGES: Dict[str, str] = {
    "en": (
        "I'm very concerned about what you've shared. Your life has value and "
        "there are people who want to help. Please reach out to a crisis "
        "counselor or emergency services immediately. You don't have to go "
        "through this alone."
    ),
    "te": (
        "మీరు పంచుకున్న విషయం గురించి నేను చాలా ఆందోళన చెందుతున్నాను. మీ "
        "జీవితానికి విలువ ఉంది మరియు మీకు సహాయం చేయాలని అనుకునే వ్యక్తులు "
        "ఉన్నారు. దయచేసి వెంటనే సంక్షోభ సలహాదారుని లేదా అత్యవసర సేవలను "
        "సంప్రదించండి."
    ),
    "hi": (
        "आपने जो साझा किया है उसके बारे में मैं बहुत चिंतित हूं। आपके जीवन का "
        "मूल्य है और ऐसे लोग हैं जो आपकी मदद करना चाहते हैं। कृपया तुरंत किसी "
        "संकट परामर्शदाता या आपातकालीन सेवाओं से संपर्क करें।"
    ),
    "ta": (
        "நீங்கள் பகிர்ந்துகொண்டது குறித்து நான் மிகவும் கவலைப்படுகிறேன். உங்கள் "
        "வாழ்க்கைக்கு மதிப்பு உண்டு மற்றும் உங்களுக்கு உதவ விரும்பும் நபர்கள் "
        "உள்ளனர். தயவுசெய்து உடனடியாக நெருக்கடி ஆலோசகர் அல்லது அவசர சேவைகளை "
        "தொடர்பு கொள்ளுங்கள்."
    ),
}

SUPPORT_MESSAGES: Dict[str, str] = {
    "en": (
        "Thank you for sharing how you're feeling. Support is available "
        "whenever you want to talk to someone."
    ),
}

CRISIS_RECOMMENDATIONS: Dict[str, Tuple[str, ...]] = {
    "en": (
        "Call 988 (Suicide & Crisis Lifeline) - Available 24/7",
        "Text HOME to 741741 (Crisis Text Line)",
        "Go to your nearest emergency room",
        "Call 911 if in immediate danger",
        "Reach out to a trusted friend or family member",
        "Contact your therapist or counselor if you have one",
    ),
    "te": (
        "సంక్షోభ హెల్ప్‌లైన్‌కు కాల్ చేయండి",
        "సమీప ఆసుపత్రికి వెళ్లండి",
        "విశ్వసనీయ స్నేహితుడు లేదా కుటుంబ సభ్యుడిని సంప్రదించండి",
        "మీకు థెరపిస్ట్ ఉంటే వారిని సంప్రదించండి",
    ),
    "hi": (
        "संकट हेल्पलाइन पर कॉल करें",
        "निकटतम अस्पताल जाएं",
        "किसी विश्वसनीय मित्र या परिवारजन से संपर्क करें",
        "यदि आपका कोई थेरेपिस्ट है तो उनसे संपर्क करें",
    ),
    "ta": (
        "நெருக்கடி உதவி எண்ணை அழைக்கவும்",
        "அருகிலுள்ள மருத்துவமனைக்கு செல்லுங்கள்",
        "நம்பகமான நண்பர் அல்லது குடும்ப உறுப்பினரை தொடர்பு கொள்ளுங்கள்",
        "உங்களுக்கு சிகிச்சையாளர் இருந்தால் அவர்களை தொடர்பு கொள்ளுங்கள்",
    ),
}


def localized(table: Dict, language: Optional[str]):
    return table.get(language or DEFAULT_LANGUAGE) or table[DEFAULT_LANGUAGE]


def crisis_message(language: Optional[str]) -> str:
    return localized(CRISIS_MESSAGES, language)


def support_message(language: Optional[str]) -> str:
    return localized(SUPPORT_MESSAGES, language)


def crisis_recommendations(language: Optional[str]) -> List[str]:
    return list(localized(CRISIS_RECOMMENDATIONS, language))


def emergency_contacts(emergency: Optional[EmergencyConfig] = None) -> List[Dict[str, str]]:
    """Hotlines shown whenever a crisis or escalation is flagged."""
    emergency = emergency or EmergencyConfig()
    return [
        {
            "name": "National Suicide Prevention Lifeline",
            "phone": emergency.suicide_line,
            "available": "24/7",
            "description": "Free and confidential emotional support",
        },
        {
            "name": "Crisis Text Line",
            "contact": f"Text HOME to {emergency.crisis_text_line}",
            "available": "24/7",
            "description": "Free, 24/7 support via text message",
        },
        {
            "name": "Emergency Services",
            "phone": "911",
            "available": "24/7",
            "description": "For immediate medical emergencies",
        },
        {
            "name": "Campus Counseling Center",
            "description": "Contact your college counseling services immediately",
            "action": "Visit counseling center or call campus emergency line",
        },
    ]
