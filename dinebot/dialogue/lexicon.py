# dinebot/dialogue/lexicon.py
from __future__ import annotations

from typing import Dict, FrozenSet, List, Tuple

# ----------------------------
# Intent pattern table
# intent -> locale -> phrases
#
# Phrases are regex fragments. A literal space means "one or more spaces" and every
# phrase is anchored on whitespace at both ends (see intents._compile), so a phrase
# only ever matches whole words of the space-padded input.
# Adding a language = adding a locale key; no classifier code changes.
# ----------------------------
LOCALES: Tuple[str, ...] = ("en", "hi", "te", "ta", "kn", "ml", "bn", "mr", "gu")

INTENT_PATTERNS: Dict[str, Dict[str, List[str]]] = {
    "cancel": {
        "en": [
            r"cancel", r"cancel order", r"cancel my order", r"cancel item",
            r"remove order", r"stop order", r"don'?t want", r"dont want", r"no need",
        ],
        "hi": [
            r"cancel karo", r"cancel kar do", r"order cancel", r"cancel करो",
            r"ऑर्डर कैंसल", r"कैंसल", r"रद्द करो", r"रद्द कर दो",
        ],
        "te": [
            r"cancel cheyyi", r"cancel cheyyandi", r"order cancel cheyyi",
            r"క్యాన్సల్", r"ఆర్డర్ క్యాన్సల్", r"రద్దు చేయండి", r"రద్దు",
        ],
        "ta": [
            r"cancel pannunga", r"cancel pannu",
            r"கேன்சல்", r"ஆர்டர் கேன்சல்", r"ரத்து செய்", r"ரத்து",
        ],
        "kn": [r"cancel maadi", r"order cancel maadi", r"ಕ್ಯಾನ್ಸಲ್", r"ಆರ್ಡರ್ ಕ್ಯಾನ್ಸಲ್", r"ರದ್ದು"],
        "ml": [r"cancel cheyyuka", r"ക്യാൻസൽ", r"ഓർഡർ ക്യാൻസൽ", r"റദ്ദാക്കുക"],
        "bn": [r"cancel koro", r"ক্যান্সেল", r"অর্ডার ক্যান্সেল", r"বাতিল করো"],
        "mr": [r"cancel kara", r"कॅन्सल करा", r"ऑर्डर कॅन्सल", r"रद्द करा"],
        "gu": [r"કેન્સલ", r"ઓર્ડર કેન્સલ", r"રદ કરો"],
    },
    "refund": {
        "en": [
            r"refund", r"refund please", r"get refund", r"money back",
            r"return money", r"want refund", r"give refund",
        ],
        "hi": [
            r"refund karo", r"paisa wapas", r"paise wapas", r"refund chahiye",
            r"पैसा वापस", r"रिफंड", r"पैसे वापस करो", r"रिफंड चाहिए",
        ],
        "te": [r"refund kavali", r"రీఫండ్", r"డబ్బు వాపస్", r"రీఫండ్ కావాలి", r"డబ్బు తిరిగి ఇవ్వండి"],
        "ta": [r"refund venum", r"panam thirumba", r"ரீஃபண்ட்", r"பணம் திரும்ப"],
        "kn": [r"refund beku", r"ರೀಫಂಡ್", r"ಹಣ ವಾಪಸ್"],
        "ml": [r"refund venam", r"റീഫണ്ട്", r"പണം തിരികെ"],
        "bn": [r"refund chai", r"টাকা ফেরত", r"রিফান্ড"],
        "mr": [r"refund pahije", r"रिफंड पाहिजे", r"पैसे परत"],
        "gu": [r"refund joiye", r"રીફંડ", r"પૈસા પાછા"],
    },
    "cart": {
        # "card"/"kart" are common speech-to-text mishearings of "cart"
        "en": [
            r"my cart", r"view cart", r"show cart", r"see cart", r"cart", r"basket",
            r"my items", r"what'?s in my cart", r"whats in cart",
            r"kart", r"my kart", r"my card", r"view card", r"show card", r"see card",
        ],
        "hi": [
            r"cart me kya hai", r"cart dikhao", r"cart dekho", r"mera cart",
            r"मेरा कार्ट", r"कार्ट", r"कार्ट दिखाओ", r"कार्ट में क्या है",
        ],
        "te": [r"cart chupinchu", r"naa cart", r"కార్ట్", r"నా కార్ట్", r"కార్ట్ చూపించు"],
        "ta": [r"cart kaattu", r"en cart", r"கார்ட்", r"என் கார்ட்"],
        "kn": [r"cart toorisu", r"nanna cart", r"ಕಾರ್ಟ್", r"ನನ್ನ ಕಾರ್ಟ್"],
        "ml": [r"cart kaanikkuka", r"ente cart", r"കാർട്ട്", r"എന്റെ കാർട്ട്"],
        "bn": [r"amar cart", r"কার্ট", r"আমার কার্ট"],
        "mr": [r"cart dakhva", r"maza cart", r"माझा कार्ट"],
        "gu": [r"cart batavo", r"maru cart", r"કાર્ટ", r"મારું કાર્ટ"],
    },
    "clear_cart": {
        "en": [
            r"clear cart", r"clear my cart", r"empty cart", r"empty my cart",
            r"remove cart", r"remove all", r"remove items", r"remove all items",
            r"delete cart", r"delete all", r"delete items",
            r"clean cart", r"reset cart", r"clear basket", r"empty basket",
            r"remove everything", r"delete everything", r"clear all",
            r"start fresh", r"start over", r"remove from cart",
            r"clear (?:my )?card", r"empty (?:my )?card", r"clear (?:my )?kart",
        ],
        "hi": [
            r"cart khali karo", r"cart saaf karo", r"cart clear karo",
            r"sab hatao", r"sab remove karo", r"sab delete karo",
            r"कार्ट खाली करो", r"कार्ट साफ करो", r"सब हटाओ",
            r"कार्ट क्लियर", r"सब कुछ हटाओ", r"आइटम हटाओ",
        ],
        "te": [
            r"cart clear cheyyi", r"cart khali cheyyi", r"anni teeseyyi",
            r"కార్ట్ క్లియర్", r"కార్ట్ ఖాళీ చేయి", r"అన్నీ తీసేయి", r"ఐటమ్స్ తీసేయి", r"కార్ట్ తీసేయి",
        ],
        "ta": [
            r"cart clear pannu", r"cart kaali pannu", r"ellam eduthudu",
            r"கார்ட் கிளியர்", r"கார்ட் காலி", r"எல்லாம் எடுத்துடு", r"ஐட்டம்ஸ் நீக்கு",
        ],
        "kn": [r"cart clear maadi", r"cart khali maadi", r"ella tegedu", r"ಕಾರ್ಟ್ ಕ್ಲಿಯರ್", r"ಕಾರ್ಟ್ ಖಾಲಿ", r"ಎಲ್ಲಾ ತೆಗೆದು"],
        "ml": [
            r"cart clear cheyyuka", r"cart kaali aakkuka", r"ellam maarruka",
            r"കാർട്ട് ക്ലിയർ", r"കാർട്ട് കാലി", r"എല്ലാം മാറ്റുക",
        ],
        "bn": [
            r"cart clear koro", r"cart khali koro", r"sob soriyo",
            r"কার্ট ক্লিয়ার", r"কার্ট খালি করো", r"সব সরিয়ে দাও",
        ],
        "mr": [
            r"cart clear kara", r"cart khali kara", r"sagla kadhun taka",
            r"कार्ट क्लियर करा", r"कार्ट खाली करा", r"सगळं काढून टाका",
        ],
        "gu": [
            r"cart clear karo", r"badhu kaadhi nakho",
            r"કાર્ટ ક્લિયર", r"કાર્ટ ખાલી કરો", r"બધું કાઢી નાખો",
        ],
    },
    "track": {
        "en": [
            r"track", r"track order", r"track my order", r"tracking",
            r"where is my order", r"where'?s my order", r"order location",
            r"delivery status", r"when will .+ arrive", r"where is .+ order",
        ],
        "hi": [
            r"kahan hai", r"kab aayega", r"order kahan", r"track karo",
            r"ट्रैक", r"कहां है", r"ऑर्डर कहां है", r"कब आएगा", r"मेरा ऑर्डर कहां",
        ],
        "te": [
            r"ekkada undi", r"order ekkada", r"eppudu vastundi", r"track cheyyi",
            r"ట్రాక్", r"ఎక్కడ ఉంది", r"నా ఆర్డర్ ఎక్కడ", r"ఎప్పుడు వస్తుంది",
        ],
        "ta": [
            r"enga irukku", r"order enga", r"eppo varum", r"track pannu",
            r"ட்ராக்", r"எங்கே இருக்கு", r"ஆர்டர் எங்கே", r"எப்போ வரும்",
        ],
        "kn": [r"elli ide", r"order elli", r"yavaga baratte", r"track maadi", r"ಟ್ರ್ಯಾಕ್", r"ಎಲ್ಲಿ ಇದೆ", r"ಆರ್ಡರ್ ಎಲ್ಲಿ"],
        "ml": [r"evide und", r"order evide", r"eppol varum", r"track cheyyuka", r"ട്രാക്ക്", r"എവിടെ ഉണ്ട്", r"ഓർഡർ എവിടെ"],
        "bn": [r"kothay ache", r"order kothay", r"kokhon ashbe", r"track koro", r"ট্র্যাক", r"কোথায় আছে", r"অর্ডার কোথায়"],
        "mr": [r"kuthe aahe", r"order kuthe", r"kevha yeil", r"track kara", r"ट्रॅक", r"कुठे आहे", r"ऑर्डर कुठे"],
        "gu": [r"order kya", r"kyare avshe", r"ટ્રેક", r"ક્યાં છે", r"ઓર્ડર ક્યાં"],
    },
    "order_status": {
        "en": [
            r"order status", r"check order", r"order history", r"previous orders?",
            r"past orders?", r"show orders?", r"view orders?", r"order details",
            r"my orders", r"status",
        ],
        "hi": [
            r"order kya hua", r"order status kya hai", r"order ka status",
            r"ऑर्डर स्टेटस", r"ऑर्डर क्या हुआ", r"स्टेटस",
        ],
        "te": [r"order status enti", r"order em aindi", r"ఆర్డర్ స్టేటస్", r"స్టేటస్"],
        "ta": [r"order status enna", r"order enna achu", r"ஆர்டர் ஸ்டேட்டஸ்", r"ஸ்டேட்டஸ்"],
        "kn": [r"order status enu", r"order enu aaytu", r"ಆರ್ಡರ್ ಸ್ಟೇಟಸ್", r"ಸ್ಟೇಟಸ್"],
        "ml": [r"order status enthaanu", r"order entha", r"ഓർഡർ സ്റ്റാറ്റസ്", r"സ്റ്റാറ്റസ്"],
        "bn": [r"order status ki", r"order ki holo", r"অর্ডার স্ট্যাটাস", r"স্ট্যাটাস"],
        "mr": [r"order status kay", r"order kay jhala", r"ऑर्डर स्टेटस"],
        "gu": [r"order status shu", r"order shu thyu", r"ઓર્ડર સ્ટેટસ", r"સ્ટેટસ"],
    },
    "show_menu": {
        "en": [
            r"show (?:me )?(?:the )?menu", r"show (?:me )?(?:all )?items",
            r"show (?:me )?(?:the )?food", r"what (?:do you have|items|food)",
            r"list (?:all )?(?:items|menu|food)", r"display (?:menu|items)",
            r"see (?:the )?(?:menu|items|food)", r"view (?:all )?(?:items|food)",
            r"all items", r"full menu", r"entire menu",
        ],
        "hi": [
            r"menu dikhao", r"sab items dikhao", r"khana dikhao",
            r"मेन्यू दिखाओ", r"सब आइटम", r"खाना दिखाओ",
        ],
        "te": [r"menu chupinchu", r"anni items chupinchu", r"మెనూ చూపించు", r"అన్ని ఐటమ్స్", r"ఏమి ఉంది"],
        "ta": [r"menu kaattu", r"ella items kaattu", r"மெனு காட்டு", r"எல்லா ஐட்டம்ஸ்", r"என்ன இருக்கு"],
        "kn": [r"menu toorisu", r"ella items toorisu", r"ಮೆನು ತೋರಿಸು", r"ಎಲ್ಲಾ ಐಟಮ್ಸ್", r"ಏನು ಇದೆ"],
        "ml": [r"menu kaanikkuka", r"ellam kaanikkuka", r"മെനു കാണിക്കുക", r"എല്ലാം കാണിക്കുക", r"എന്താണ് ഉള്ളത്"],
        "bn": [r"menu dekho", r"sob items dekho", r"মেনু দেখো", r"সব আইটেম", r"কি আছে"],
        "mr": [r"menu dakhva", r"sagla dakhva", r"मेन्यू दाखवा", r"सगळे आइटम", r"काय आहे"],
        "gu": [r"menu batavo", r"badha items batavo", r"મેનુ બતાવો", r"બધા આઇટમ્સ", r"શું છે"],
    },
    "show_menu_veg": {
        "en": [
            r"veg (?:items?|menu|food|dishes?)", r"vegetarian (?:items?|menu|food|dishes?)",
            r"show (?:me )?veg", r"only veg", r"pure veg", r"veggie (?:items?|menu|food)",
        ],
        "hi": [r"veg (?:items?|khana) dikhao", r"शाकाहारी", r"वेज आइटम", r"वेज खाना", r"सिर्फ वेज"],
        "te": [r"veg items chupinchu", r"శాకాహారం", r"వెజ్ ఐటమ్స్"],
        "ta": [r"veg items kaattu", r"சைவம்", r"வெஜ் ஐட்டம்ஸ்"],
        "kn": [r"veg items toorisu", r"ಸಸ್ಯಾಹಾರ", r"ವೆಜ್ ಐಟಮ್ಸ್"],
        "ml": [r"veg items kaanikkuka", r"സസ്യാഹാരം", r"വെജ് ഐറ്റംസ്"],
        "bn": [r"veg items dekho", r"নিরামিষ", r"ভেজ আইটেম"],
        "mr": [r"veg items dakhva"],
        "gu": [r"veg items batavo", r"શાકાહારી", r"વેજ આઇટમ્સ"],
    },
    "show_menu_nonveg": {
        "en": [
            r"non[\s-]?veg (?:items?|menu|food|dishes?)", r"show (?:me )?non[\s-]?veg",
            r"only non[\s-]?veg", r"meat (?:items?|menu|dishes?)",
        ],
        "hi": [r"non[\s-]?veg (?:items?|khana) dikhao", r"मांसाहारी", r"नॉन[\s-]?वेज आइटम", r"नॉन[\s-]?वेज खाना", r"सिर्फ नॉन[\s-]?वेज"],
        "te": [r"non[\s-]?veg items chupinchu", r"మాంసాహారం", r"నాన్[\s-]?వెజ్ ఐటమ్స్"],
        "ta": [r"non[\s-]?veg items kaattu", r"அசைவம்", r"நான்[\s-]?வெஜ் ஐட்டம்ஸ்"],
        "kn": [r"non[\s-]?veg items toorisu", r"ಮಾಂಸಾಹಾರ", r"ನಾನ್[\s-]?ವೆಜ್ ಐಟಮ್ಸ್"],
        "ml": [r"non[\s-]?veg items kaanikkuka", r"മാംസാഹാരം", r"നോൺ[\s-]?വെജ് ഐറ്റംസ്"],
        "bn": [r"non[\s-]?veg items dekho", r"আমিষ", r"নন[\s-]?ভেজ আইটেম"],
        "mr": [r"non[\s-]?veg items dakhva"],
        "gu": [r"non[\s-]?veg items batavo", r"માંસાહારી", r"નોન[\s-]?વેજ આઇટમ્સ"],
    },
}

# Whole-message greetings that restart the conversation.
GREETINGS: FrozenSet[str] = frozenset({
    "hi", "hello", "hey", "start", "hii", "helo",
    "namaste", "namaskar", "namaskaram", "vanakkam", "nomoshkar",
    "नमस्ते", "నమస్కారం", "வணக்கம்", "ನಮಸ್ಕಾರ", "നമസ്കാരം", "নমস্কার",
})

HOME_WORDS: FrozenSet[str] = frozenset({"home", "back", "main menu"})

# ----------------------------
# Food-type keywords
# ----------------------------
# Ingredient words are the most specific food-type hint and stay in the search
# terms (they are useful matches on their own).
NONVEG_INGREDIENTS: Tuple[str, ...] = (
    "chicken", "mutton", "fish", "prawn", "keema", "beef", "pork", "seafood",
)

NONVEG_GENERIC = (r"non[\s-]?veg", r"nonveg", r"meat")
VEG_GENERIC = (r"pure veg", r"vegetarian", r"veggie", r"veg", r"eggless")

# Generic food-type words removed from search terms, longest first.
FOOD_TYPE_STRIP = (
    r"pure veg", r"non[\s-]?veg", r"nonveg", r"vegetarian", r"veggie", r"veg",
    r"meat", r"egg",
)

# ----------------------------
# Transliteration (native script + romanized regional -> English)
# ----------------------------
TRANSLITERATIONS: Dict[str, str] = {
    # Hindi
    "ब्रेड": "bread", "रोटी": "roti", "चावल": "rice", "दाल": "dal",
    "सब्जी": "sabji", "पनीर": "paneer", "चिकन": "chicken", "मटन": "mutton",
    "बिरयानी": "biryani", "पुलाव": "pulao", "नान": "naan", "पराठा": "paratha",
    "समोसा": "samosa", "पकोड़ा": "pakoda", "चाय": "tea", "कॉफी": "coffee",
    "लस्सी": "lassi", "जूस": "juice", "पानी": "water", "कोल्ड ड्रिंक": "cold drink",
    "आइसक्रीम": "ice cream", "केक": "cake", "मिठाई": "sweet", "गुलाब जामुन": "gulab jamun",
    "पिज़्ज़ा": "pizza", "बर्गर": "burger", "सैंडविच": "sandwich", "मोमो": "momo",
    "नूडल्स": "noodles", "फ्राइड राइस": "fried rice", "मंचूरियन": "manchurian",
    "सूप": "soup", "सलाद": "salad", "फ्राइज़": "fries", "चिप्स": "chips",
    "अंडा": "egg", "आमलेट": "omelette", "मछली": "fish", "झींगा": "prawn",
    "तंदूरी": "tandoori", "कबाब": "kabab", "टिक्का": "tikka", "कोरमा": "korma",
    "करी": "curry", "मसाला": "masala", "फ्राइड": "fried", "ग्रिल्ड": "grilled",
    # Telugu
    "బ్రెడ్": "bread", "అన్నం": "rice", "చికెన్": "chicken", "మటన్": "mutton",
    "బిర్యానీ": "biryani", "కేక్": "cake", "పిజ్జా": "pizza", "బర్గర్": "burger",
    "నూడుల్స్": "noodles", "ఐస్ క్రీమ్": "ice cream", "టీ": "tea", "కాఫీ": "coffee",
    "పులుసు": "pulusu", "కూర": "koora",
    # Tamil
    "பிரெட்": "bread", "சோறு": "rice", "சிக்கன்": "chicken", "மட்டன்": "mutton",
    "பிரியாணி": "biryani", "கேக்": "cake", "பீட்சா": "pizza", "பர்கர்": "burger",
    "குழம்பு": "kuzhambu",
    # Kannada
    "ಬ್ರೆಡ್": "bread", "ಅನ್ನ": "rice", "ಚಿಕನ್": "chicken", "ಮಟನ್": "mutton",
    "ಬಿರಿಯಾನಿ": "biryani", "ಕೇಕ್": "cake", "ಪಿಜ್ಜಾ": "pizza",
    # Bengali
    "রুটি": "bread", "ভাত": "rice", "মুরগি": "chicken", "মাংস": "mutton",
    "বিরিয়ানি": "biryani", "কেক": "cake", "পিৎজা": "pizza",
    # Malayalam
    "ബ്രെഡ്": "bread", "ചോറ്": "rice", "ചിക്കൻ": "chicken", "മട്ടൻ": "mutton",
    "ബിരിയാണി": "biryani", "കേക്ക്": "cake", "പിസ്സ": "pizza",
    # romanized regional words
    "chawal": "rice", "daal": "dal", "sabzi": "sabji", "chai": "tea", "doodh": "milk",
    "pani": "water", "anda": "egg", "gosht": "mutton", "murgh": "chicken",
    "machli": "fish", "kodi": "chicken", "kozhi": "chicken", "mamsam": "mutton",
    "aattu": "mutton", "chepala": "fish", "meen": "fish", "royyalu": "prawn",
    "bendakaya": "okra", "vankaya": "brinjal", "annam": "rice",
}

# ----------------------------
# Synonym groups (symmetric). A term in a group expands to every other member.
# ----------------------------
SYNONYM_GROUPS: Tuple[FrozenSet[str], ...] = (
    frozenset({"curry", "gravy", "pulusu", "koora", "kura", "kuzhambu", "kulambu", "salan"}),
    frozenset({"biryani", "biriyani", "briyani"}),
    frozenset({"fry", "vepudu", "varuval"}),
    frozenset({"rice", "sadam", "bhaat"}),
    frozenset({"curd", "dahi", "perugu", "thayir", "mosaru"}),
    frozenset({"dal", "pappu", "paruppu"}),
    frozenset({"fries", "chips", "french fries"}),
    frozenset({"cold drink", "soft drink", "soda"}),
    frozenset({"dessert", "sweet", "mithai"}),
    frozenset({"roti", "chapati", "chapathi"}),
    frozenset({"idli", "idly"}),
    frozenset({"dosa", "dosai", "dose"}),
    frozenset({"vada", "vadai", "vade"}),
    frozenset({"ice cream", "icecream"}),
)

# Words that never carry search meaning on their own.
STOPWORDS: FrozenSet[str] = frozenset({
    "i", "a", "an", "the", "and", "with", "for", "of", "to", "me", "my", "some",
    "want", "need", "give", "get", "please", "pls", "plz", "can", "could", "would",
    "like", "have", "show", "order", "send", "one", "two", "three", "is", "are",
    "do", "you", "any", "in", "on", "it", "item", "items", "dish", "dishes", "food",
    "chahiye", "dedo", "kavali", "venum", "beku", "venam",
})
