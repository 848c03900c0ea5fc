"""
South African job-market reference data.

Keyword lists used by the ATS scorer and the job matcher, the province/city
map, and per-industry search templates.
"""

import re

# Skill keywords recruiters search for in CVs
SKILL_KEYWORDS = [
    "management", "leadership", "communication", "project management", "teamwork",
    "problem solving", "customer service", "sales", "marketing", "research",
    "analysis", "reporting", "presentation", "microsoft office", "excel",
    "powerpoint", "word", "outlook", "database", "crm", "erp", "sap",
    "programming", "coding", "software development", "web development",
    "java", "python", "javascript", "html", "css", "react", "angular", "vue",
    "nodejs", "php", "sql", "nosql", "mongodb", "mysql", "postgresql",
    "accounting", "finance", "budgeting", "forecasting", "audit", "tax",
    "legal", "compliance", "regulatory", "governance", "risk management",
    "human resources", "recruitment", "training", "development", "performance management",
    "operations", "logistics", "supply chain", "procurement", "inventory management",
    "quality control", "quality assurance", "business analysis", "business development",
    "strategy", "planning", "execution", "implementation", "stakeholder management",
]

# Terms that mark a CV as written for the South African market
SA_CONTEXT_KEYWORDS = [
    "b-bbee", "bee", "broad-based black economic empowerment", "nqf", "national qualifications framework",
    "saqa", "south african qualifications authority", "seta", "sector education and training authority",
    "employment equity", "affirmative action", "skills development", "diversity", "transformation",
    "johannesburg", "cape town", "durban", "pretoria", "bloemfontein", "port elizabeth", "east london",
    "gauteng", "western cape", "kwazulu-natal", "eastern cape", "free state", "mpumalanga", "limpopo",
    "north west", "northern cape", "south africa", "bilingual", "multilingual", "afrikaans", "zulu",
    "xhosa", "sotho", "tswana", "venda", "tsonga", "swati", "ndebele", "popi", "popia",
    "protection of personal information",
    "bcom", "bsc", "ba", "llb", "ca(sa)", "saica", "saipa", "cima", "acca", "ict", "matric",
]

# Wider list used by job matching (legislation, institutions, sectors, places)
SA_MATCHING_KEYWORDS = [
    "B-BBEE", "BBBEE", "Black Economic Empowerment",
    "Employment Equity", "EE", "Skills Development",
    "SETA", "NQF", "SAQA", "King IV", "POPI", "POPIA",
    "FICA", "FAIS", "National Credit Act", "Consumer Protection Act",
    "Matric", "NSC", "National Senior Certificate",
    "UNISA", "Wits", "UCT", "UJ", "UP", "UKZN", "NWU", "UFS",
    "Public Service", "Government", "Municipality",
    "PFMA", "Municipal Finance Management Act", "MFMA",
    "Mining", "Agriculture", "Financial Services",
    "JSE", "Banking", "Retail", "Telecommunications",
    "Manufacturing", "Tourism", "Energy", "Resources",
    "Afrikaans", "isiZulu", "isiXhosa", "Sesotho", "Setswana",
    "Sepedi", "siSwati", "Tshivenda", "Xitsonga", "isiNdebele",
    "Gauteng", "Western Cape", "KwaZulu-Natal", "Eastern Cape",
    "Free State", "Mpumalanga", "Limpopo", "North West", "Northern Cape",
    "Johannesburg", "Cape Town", "Durban", "Pretoria", "Bloemfontein",
    "East London", "Port Elizabeth", "Gqeberha", "Nelspruit", "Kimberley",
    "Polokwane", "Rustenburg", "Pietermaritzburg",
]

PROVINCE_CITIES = {
    "Gauteng": ["Johannesburg", "Pretoria", "Centurion", "Sandton", "Midrand", "Soweto"],
    "Western Cape": ["Cape Town", "Stellenbosch", "Paarl", "George", "Hermanus"],
    "KwaZulu-Natal": ["Durban", "Pietermaritzburg", "Richards Bay", "Newcastle", "Ladysmith"],
    "Eastern Cape": ["Port Elizabeth", "Gqeberha", "East London", "Mthatha", "Grahamstown", "Makhanda"],
    "Free State": ["Bloemfontein", "Welkom", "Bethlehem", "Sasolburg"],
    "Mpumalanga": ["Nelspruit", "Mbombela", "Witbank", "Emalahleni", "Secunda"],
    "Limpopo": ["Polokwane", "Tzaneen", "Mokopane", "Thohoyandou"],
    "North West": ["Rustenburg", "Potchefstroom", "Klerksdorp", "Mahikeng"],
    "Northern Cape": ["Kimberley", "Upington", "Springbok"],
}

PROVINCES = list(PROVINCE_CITIES)

SA_INDUSTRIES = [
    "Mining & Minerals",
    "Agriculture & Farming",
    "Financial Services",
    "Information Technology",
    "Retail & Consumer Goods",
    "Manufacturing",
    "Government & Public Sector",
    "Education & Training",
    "Healthcare & Medical",
    "Construction & Engineering",
    "Tourism & Hospitality",
    "Transport & Logistics",
    "Energy & Utilities",
    "Telecommunications",
    "Legal Services",
    "Media & Communications",
]

_BASE_TEMPLATE = {
    "search_terms": [],
    "locations": [],
    "skills": [],
    "qualifications": [],
    "experience_levels": ["Entry Level", "Mid Level", "Senior Level"],
    "employment_types": ["Full-Time", "Part-Time", "Contract", "Temporary"],
    "salary_range": None,
}

INDUSTRY_TEMPLATES = {
    "Mining & Minerals": {
        "search_terms": ["Mining", "Minerals", "Resources", "Extraction", "Geology"],
        "locations": ["Rustenburg", "Johannesburg", "Mpumalanga", "Limpopo", "North West"],
        "skills": ["Mining Operations", "Geology", "Mineral Processing", "Safety Management", "Environmental Compliance"],
        "qualifications": ["Engineering Degree", "Geology Degree", "Mining Diploma", "NQF Level 4+"],
        "salary_range": "R25,000 - R120,000 monthly",
    },
    "Financial Services": {
        "search_terms": ["Banking", "Financial", "Investment", "Insurance", "Wealth"],
        "locations": ["Johannesburg", "Sandton", "Cape Town", "Durban", "Pretoria"],
        "skills": ["Financial Analysis", "Risk Management", "Compliance", "FAIS", "FICA", "Client Relationship Management"],
        "qualifications": ["BCom Finance", "CFP", "CFA", "SAICA", "NQF Level 6+"],
        "salary_range": "R30,000 - R100,000 monthly",
    },
    "Information Technology": {
        "search_terms": ["Software", "Development", "IT", "Tech", "Digital", "Programming"],
        "locations": ["Johannesburg", "Cape Town", "Pretoria", "Durban", "Stellenbosch"],
        "skills": ["Software Development", "Cloud Computing", "Cybersecurity", "Data Analysis", "Project Management"],
        "qualifications": ["Computer Science Degree", "IT Diploma", "Certifications", "NQF Level 5+"],
        "salary_range": "R30,000 - R90,000 monthly",
    },
    "Government & Public Sector": {
        "search_terms": ["Government", "Public Service", "Municipality", "Public Sector", "Civil Service"],
        "locations": ["Pretoria", "Cape Town", "Bloemfontein", "Provincial Capitals"],
        "skills": ["Public Administration", "Policy Development", "PFMA", "MFMA", "Governance"],
        "qualifications": ["Public Administration Degree", "NQF Level 4+"],
        "salary_range": "R15,000 - R80,000 monthly",
    },
    "Healthcare & Medical": {
        "search_terms": ["Healthcare", "Medical", "Hospital", "Clinic", "Nursing", "Pharmacy"],
        "locations": ["All major cities", "Provincial hospitals", "Rural areas"],
        "skills": ["Patient Care", "Medical Administration", "Clinical Skills", "Healthcare Management"],
        "qualifications": ["Medical Degree", "Nursing Diploma", "Healthcare Certifications", "NQF Level 5+"],
        "salary_range": "R20,000 - R100,000 monthly",
    },
    "Retail & Consumer Goods": {
        "search_terms": ["Retail", "Consumer", "Sales", "Merchandising", "Store", "FMCG"],
        "locations": ["Shopping centers", "Urban areas", "All provinces"],
        "skills": ["Sales", "Customer Service", "Merchandising", "Inventory Management", "Retail Operations"],
        "qualifications": ["Retail Management Diploma", "Marketing Degree", "NQF Level 3+"],
        "salary_range": "R8,000 - R60,000 monthly",
    },
    "Construction & Engineering": {
        "search_terms": ["Construction", "Engineering", "Building", "Infrastructure", "Projects"],
        "locations": ["Urban centers", "Development areas", "All provinces"],
        "skills": ["Project Management", "CAD", "Structural Design", "Site Supervision", "Quantity Surveying"],
        "qualifications": ["Engineering Degree", "Construction Diploma", "NQF Level 4+"],
        "salary_range": "R20,000 - R90,000 monthly",
    },
    "Agriculture & Farming": {
        "search_terms": ["Agriculture", "Farming", "Agribusiness", "Livestock", "Crops"],
        "locations": ["Free State", "Western Cape", "KwaZulu-Natal", "Mpumalanga", "Rural areas"],
        "skills": ["Crop Management", "Livestock Management", "Farm Operations", "Agricultural Technology"],
        "qualifications": ["Agricultural Degree", "Farming Diploma", "NQF Level 3+"],
        "salary_range": "R10,000 - R60,000 monthly",
    },
}


def get_industry_template(industry: str) -> dict:
    """Search template for an industry; the empty base template when unknown."""
    template = dict(_BASE_TEMPLATE)
    template.update(INDUSTRY_TEMPLATES.get(industry, {}))
    template["industry"] = industry
    return template


def get_province_cities(location: str) -> list[str]:
    """Major cities of the province named in a location string."""
    normalized = location.strip().lower()
    for province, cities in PROVINCE_CITIES.items():
        if province.lower() in normalized:
            return cities
    return []


def normalize_province(value: str | None) -> str | None:
    """Canonical province name, or None when the value is not a province."""
    if not value:
        return None
    wanted = value.strip().lower().replace(" ", "").replace("-", "")
    for province in PROVINCES:
        if province.lower().replace(" ", "").replace("-", "") == wanted:
            return province
    return None


_pattern_cache: dict[str, re.Pattern] = {}


def contains_keyword(text_lower: str, keyword: str) -> bool:
    """
    Case-insensitive keyword test against lower-cased text.

    Short keywords (four characters or fewer, e.g. "ba", "bee", "sql") must
    appear as whole words; longer ones match as substrings.
    """
    keyword = keyword.lower()
    if len(keyword) > 4:
        return keyword in text_lower
    pattern = _pattern_cache.get(keyword)
    if pattern is None:
        pattern = re.compile(r"(?<![a-z0-9])" + re.escape(keyword) + r"(?![a-z0-9])")
        _pattern_cache[keyword] = pattern
    return pattern.search(text_lower) is not None


def find_keywords(text: str, keywords: list[str]) -> list[str]:
    text_lower = text.lower()
    return [k for k in keywords if contains_keyword(text_lower, k)]
