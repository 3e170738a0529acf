"""UN Sustainable Development Goal labels and PMC search queries."""

from __future__ import annotations

SDG_LABELS: dict[int, str] = {
    1: "No Poverty",
    2: "Zero Hunger",
    3: "Good Health & Well-Being",
    4: "Quality Education",
    5: "Gender Equality",
    6: "Clean Water & Sanitation",
    7: "Affordable & Clean Energy",
    8: "Decent Work & Economic Growth",
    9: "Industry, Innovation & Infrastructure",
    10: "Reduced Inequalities",
    11: "Sustainable Cities & Communities",
    12: "Responsible Consumption & Production",
    13: "Climate Action",
    14: "Life Below Water",
    15: "Life on Land",
    16: "Peace, Justice & Strong Institutions",
    17: "Partnerships for the Goals",
}

SDG_QUERIES: dict[int, str] = {
    1: '(poverty OR "low-income" OR "social protection")',
    2: '(hunger OR malnutrition OR "food security" OR "sustainable agriculture")',
    3: '("public health" OR "global health" OR "disease prevention" OR "health care access")',
    4: '(education OR literacy OR "learning outcomes" OR schooling)',
    5: '("gender equality" OR "women empowerment" OR "gender-based violence")',
    6: '("clean water" OR sanitation OR hygiene OR "water quality")',
    7: '("renewable energy" OR "clean energy" OR "energy access" OR "energy efficiency")',
    8: '(employment OR "decent work" OR "economic growth" OR "occupational health")',
    9: '(infrastructure OR industrialization OR innovation OR "technology transfer")',
    10: '(inequality OR "health disparities" OR "social inclusion" OR migration)',
    11: '(urbanization OR "sustainable cities" OR housing OR "air pollution")',
    12: '("sustainable consumption" OR "food waste" OR recycling OR "circular economy")',
    13: '("climate change" OR "global warming" OR "climate adaptation" OR "greenhouse gas")',
    14: '("marine ecosystem" OR ocean OR fisheries OR "coral reef")',
    15: '(biodiversity OR deforestation OR "land degradation" OR "terrestrial ecosystem")',
    16: '(violence OR justice OR corruption OR "armed conflict")',
    17: '("global partnership" OR "international cooperation" OR "development aid")',
}


def sdg_label(sdg: int) -> str:
    return SDG_LABELS.get(sdg, "")
