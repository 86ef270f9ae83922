"""
Shared fixtures: a small six-language dataset and a model trained on it.
"""

import pytest

from Classifier import LanguageModel

TRAINING_SENTENCES = {
    "German": [
        "Ich gehe heute mit meinem Hund im Park spazieren.",
        "Das Wetter ist schön und die Sonne scheint.",
        "Wir haben gestern einen neuen Tisch gekauft.",
        "Der Zug nach Berlin hat leider Verspätung.",
        "Meine Schwester wohnt seit drei Jahren in München.",
        "Kannst du mir bitte das Brot geben?",
        "Die Kinder spielen im Garten mit dem Ball.",
        "Ich trinke jeden Morgen eine Tasse Kaffee.",
    ],
    "English": [
        "I am walking my dog in the park today.",
        "The weather is nice and the sun is shining.",
        "We bought a new table yesterday afternoon.",
        "The train to London is running late again.",
        "My sister has lived in Manchester for three years.",
        "Could you please pass me the bread?",
        "The children are playing with the ball in the garden.",
        "I drink a cup of coffee every morning.",
    ],
    "French": [
        "Je promène mon chien dans le parc aujourd'hui.",
        "Il fait beau et le soleil brille.",
        "Nous avons acheté une nouvelle table hier.",
        "Le train pour Paris est encore en retard.",
        "Ma sœur habite à Lyon depuis trois ans.",
        "Peux-tu me passer le pain, s'il te plaît?",
        "Les enfants jouent avec le ballon dans le jardin.",
        "Je bois une tasse de café chaque matin.",
    ],
    "Italian": [
        "Oggi porto a spasso il mio cane nel parco.",
        "Il tempo è bello e il sole splende.",
        "Ieri abbiamo comprato un tavolo nuovo.",
        "Il treno per Roma è di nuovo in ritardo.",
        "Mia sorella vive a Milano da tre anni.",
        "Mi passi il pane, per favore?",
        "I bambini giocano con la palla in giardino.",
        "Bevo una tazza di caffè ogni mattina.",
    ],
    "Romanian": [
        "Astăzi îmi plimb câinele în parc.",
        "Vremea este frumoasă și soarele strălucește.",
        "Ieri am cumpărat o masă nouă.",
        "Trenul spre București întârzie din nou.",
        "Sora mea locuiește în Cluj de trei ani.",
        "Îmi poți da pâinea, te rog?",
        "Copiii se joacă cu mingea în grădină.",
        "Beau o ceașcă de cafea în fiecare dimineață.",
    ],
    "Spanish": [
        "Hoy paseo a mi perro por el parque.",
        "Hace buen tiempo y el sol brilla.",
        "Ayer compramos una mesa nueva.",
        "El tren a Madrid vuelve a llegar tarde.",
        "Mi hermana vive en Sevilla desde hace tres años.",
        "¿Me pasas el pan, por favor?",
        "Los niños juegan con la pelota en el jardín.",
        "Tomo una taza de café cada mañana.",
    ],
}

TEST_SENTENCES = {
    "German": ["Mein Bruder trinkt gerne Kaffee im Garten.", "Der Hund spielt mit den Kindern."],
    "English": ["My brother likes to drink coffee in the garden.", "The dog is playing with the children."],
    "French": ["Mon frère aime boire du café dans le jardin.", "Le chien joue avec les enfants."],
    "Italian": ["Mio fratello beve volentieri il caffè in giardino.", "Il cane gioca con i bambini."],
    "Romanian": ["Fratele meu bea cu plăcere cafea în grădină.", "Câinele se joacă cu copiii."],
    "Spanish": ["Mi hermano toma café en el jardín.", "El perro juega con los niños."],
}


def interleave(sentences_by_label):
    """Rows ordered sentence by sentence, so labels first appear in dict order."""
    rows = []
    longest = max(len(sentences) for sentences in sentences_by_label.values())
    for i in range(longest):
        for label, sentences in sentences_by_label.items():
            if i < len(sentences):
                rows.append((label, sentences[i]))
    return rows


def write_rows(path, rows, header=None):
    lines = []
    if header:
        lines.append("\t".join(header))
    lines.extend(f"{label}\t{text}" for label, text in rows)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture(scope="session")
def data_dir(tmp_path_factory):
    directory = tmp_path_factory.mktemp("data")
    write_rows(directory / "training.tsv", interleave(TRAINING_SENTENCES))
    write_rows(directory / "test.tsv", interleave(TEST_SENTENCES))
    return directory


@pytest.fixture(scope="session")
def training_file(data_dir):
    return data_dir / "training.tsv"


@pytest.fixture(scope="session")
def test_file(data_dir):
    return data_dir / "test.tsv"


@pytest.fixture(scope="session")
def model_file(data_dir):
    return data_dir / "Model.zip"


@pytest.fixture(scope="session")
def trained_model(training_file, model_file):
    return LanguageModel.train(training_file, model_file)
