"""Built-in sample graph shown when no snapshot is given."""

from conceptour.graph import GraphData

SAMPLE_GRAPH = {
    "metadata": {"title": "Stoicism"},
    "nodes": [
        {"id": "stoicism", "label": "Stoicism", "type": "ROOT",
         "shortSummary": "Hellenistic philosophy of virtue and reason."},
        {"id": "ethics", "label": "Ethics", "type": "CATEGORY",
         "shortSummary": "Virtue as the only good."},
        {"id": "physics", "label": "Physics", "type": "CATEGORY",
         "shortSummary": "A rational, providential cosmos."},
        {"id": "logic", "label": "Logic", "type": "CATEGORY",
         "shortSummary": "Propositional logic and theory of knowledge."},
        {"id": "dichotomy", "label": "Dichotomy of control", "type": "CONCEPT"},
        {"id": "virtue", "label": "Virtue", "type": "CONCEPT"},
        {"id": "apatheia", "label": "Apatheia", "type": "CONCEPT"},
        {"id": "enchiridion", "label": "_Enchiridion_", "type": "WORK"},
        {"id": "meditations", "label": "_Meditations_", "type": "WORK"},
        {"id": "logos", "label": "Logos", "type": "CONCEPT"},
        {"id": "pneuma", "label": "Pneuma", "type": "CONCEPT"},
        {"id": "ekpyrosis", "label": "Ekpyrosis", "type": "CONCEPT"},
        {"id": "phantasia", "label": "Kataleptic impression", "type": "CONCEPT"},
        {"id": "lekta", "label": "Lekta", "type": "CONCEPT"},
        {"id": "cynicism", "label": "Cynicism", "type": "CONCEPT"},
    ],
    "links": [
        {"source": "stoicism", "target": "ethics", "relationLabel": "branch"},
        {"source": "stoicism", "target": "physics", "relationLabel": "branch"},
        {"source": "stoicism", "target": "logic", "relationLabel": "branch"},
        {"source": "ethics", "target": "virtue", "relationLabel": "central idea"},
        {"source": "ethics", "target": "dichotomy", "relationLabel": "practice"},
        {"source": "virtue", "target": "apatheia", "relationLabel": "leads to"},
        {"source": "dichotomy", "target": "enchiridion", "relationLabel": "opens"},
        {"source": "ethics", "target": "meditations", "relationLabel": "applied in"},
        {"source": "physics", "target": "logos", "relationLabel": "principle"},
        {"source": "logos", "target": "pneuma", "relationLabel": "carried by"},
        {"source": "physics", "target": "ekpyrosis", "relationLabel": "cycle"},
        {"source": "logic", "target": "phantasia", "relationLabel": "criterion"},
        {"source": "logic", "target": "lekta", "relationLabel": "meaning"},
    ],
}


def sample_graph() -> GraphData:
    return GraphData.from_dict(SAMPLE_GRAPH)
