"""
Fixed instructions sent to the model together with the page images.

The manifests are Brazilian Portuguese forms, so the prompts are written in
Portuguese and name the printed labels exactly as they appear on the form.
"""

# Header block: a single JSON object
MMR_HEADER_PROMPT = """
Você é um assistente de extração de dados altamente preciso, especializado em formulários de Manifesto Marítimo de Resíduos (MMR) em português.
Analise a imagem fornecida de um formulário MMR e extraia os seguintes campos do cabeçalho. Preste muita atenção aos rótulos exatos.
Os campos a serem extraídos são:
- "MMR N°": (O número do MMR, exemplo: "027/2025")
- "DATA": (Todas as data do MMR, exemplo: "27-fev-25")
- "GERADOR": (O nome do Gerador, exemplo: "VALARIS DS-17")
- "TRANSPORTADOR": (O nome do Transportador, exemplo: "DELTA COMMANDER")
- "BASE DE APOIO": (O nome da Base de Apoio, exemplo: "TRIUNFO LOGISTICA")
- "ATIVIDADE": (A descrição da Atividade, exemplo: "Perfuração")
- "BACIA": (O nome da Bacia, exemplo: "Bacalhau")
- "POÇO": (A identificação do Poço, exemplo: "WI-5")
- "PROJETO": (O nome do Projeto, se disponível, exemplo: "Projeto Marlim Azul")

Retorne os dados extraídos como um ÚNICO objeto JSON. As chaves do JSON devem ser exatamente: "mmrNo", "data", "gerador", "transportador", "baseDeApoio", "atividade", "bacia", "poco", "projeto".
Se um campo não estiver presente, não for legível ou não puder ser encontrado na imagem, use null como valor para esse campo.
Não adicione explicações ou texto adicional fora do objeto JSON.

Exemplo de formato JSON esperado:
{
  "mmrNo": "027/2025",
  "data": "27-fev-25",
  "gerador": "VALARIS DS-17",
  "transportador": "DELTA COMMANDER",
  "baseDeApoio": "TRIUNFO LOGISTICA",
  "atividade": "Perfuração",
  "bacia": "Bacalhau",
  "poco": "WI-5",
  "projeto": "Projeto Marlim Azul"
}
"""

# Waste table: a JSON array, one object per row
MMR_ITEMS_PROMPT = """
Você é um assistente de extração de dados altamente preciso, especializado em formulários de Manifesto Marítimo de Resíduos (MMR) em português.
Analise a imagem fornecida de um formulário MMR e extraia TODOS os itens da tabela de resíduos.
Para CADA item da tabela, extraia os seguintes campos. Preste muita atenção aos cabeçalhos das colunas.
Os campos a serem extraídos para cada item são:
- "ITEM": (O número ou letra do item na primeira coluna, exemplo: "1", "A009")
- "CÓDIGO": (O código do resíduo, exemplo: "A001")
- "TIPO DE RESÍDUO": (A descrição do tipo de resíduo, exemplo: "Madeira não contaminada")
- "DESCRIÇÃO": (A descrição detalhada do resíduo, exemplo: "Non contaminated wood")
- "ACONDICIONAMENTO": (O tipo de acondicionamento, exemplo: "Lote", "Big Bag")
- "QUANTIDADE": (A quantidade, que é um valor numérico, exemplo: 1, 9)
- "UNIDADE": (A unidade da quantidade, exemplo: "UN")
- "PESO (KG)": (O peso em quilogramas, que é um valor numérico, exemplo: 715, 9)
- "CLASSE NBR": (A Classe NBR, exemplo: "IIA", "IIB")
- "MTR": (O número do MTR, exemplo: "2113232195")

Retorne os dados extraídos como um ÚNICO array de objetos JSON. Cada objeto no array representa um item da tabela.
As chaves do JSON para cada objeto devem ser exatamente: "item", "codigo", "tipoDeResiduo", "descricao", "acondicionamento", "quantidade", "unidade", "pesoKg", "classeNbr", "mtr".
Se um campo específico para um item não estiver presente, não for legível ou não puder ser encontrado, use null como valor para esse campo dentro do objeto do item.
Para os campos "quantidade" e "pesoKg", se forem números, retorne-os como números no JSON. Se não puderem ser interpretados como números, retorne-os como strings ou null.
Não adicione explicações ou texto adicional fora do array JSON.

Exemplo de formato JSON esperado para os itens:
[
  {
    "item": "1",
    "codigo": "A009",
    "tipoDeResiduo": "Madeira não contaminada",
    "descricao": "Non contaminated wood",
    "acondicionamento": "Lote",
    "quantidade": 1,
    "unidade": "UN",
    "pesoKg": 715,
    "classeNbr": "IIA",
    "mtr": "2113232195"
  },
  {
    "item": "2",
    "codigo": "A001",
    "tipoDeResiduo": "Papel/papelão não contaminado",
    "descricao": "Non contaminated paper/cardboard",
    "acondicionamento": "Big Bag",
    "quantidade": 1,
    "unidade": "UN",
    "pesoKg": 9,
    "classeNbr": "IIA",
    "mtr": "2113249689"
  }
]
"""

# Generic forms: sections of topic/answer pairs
SECTIONS_PROMPT = """
Você é um assistente de extração de dados altamente preciso, especializado em formulários em português.
Analise a(s) imagem(ns) fornecida(s) e extraia TODO o conteúdo preenchido do formulário, agrupado pelas seções impressas no documento.

Retorne os dados extraídos como um ÚNICO array JSON. Cada elemento representa uma seção e deve ter exatamente as chaves:
- "title": o título da seção como aparece no formulário
- "fields": um array de objetos com as chaves "topic" (o rótulo do campo) e "answer" (o valor preenchido)

Se um valor não estiver presente ou não for legível, use null em "answer".
Não adicione explicações ou texto adicional fora do array JSON.

Exemplo de formato JSON esperado:
[
  {
    "title": "Dados Gerais",
    "fields": [
      {"topic": "MMR N°", "answer": "027/2025"},
      {"topic": "Data", "answer": "27-fev-25"}
    ]
  }
]
"""

HEADER_KEYS = (
    'mmrNo', 'data', 'gerador', 'transportador', 'baseDeApoio',
    'atividade', 'bacia', 'poco', 'projeto',
)

ITEM_KEYS = (
    'item', 'codigo', 'tipoDeResiduo', 'descricao', 'acondicionamento',
    'quantidade', 'unidade', 'pesoKg', 'classeNbr', 'mtr',
)
