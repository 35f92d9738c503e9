from sqlalchemy import (
    JSON,
    BigInteger,
    Column,
    DateTime,
    Float,
    Integer,
    Numeric,
    String,
    Text,
)

from gymp2.database import Base


class Usuario(Base):
    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(128), nullable=True)
    password_salt = Column(String(64), nullable=True)
    role = Column(String(20), nullable=False, default="user")
    status = Column(String(20), nullable=False, default="ativo")
    criado_em = Column(DateTime(timezone=True), nullable=True)
    ultimo_login = Column(DateTime(timezone=True), nullable=True)


class Sessao(Base):
    __tablename__ = "sessoes"

    token = Column(String(64), primary_key=True)
    email = Column(String(255), index=True, nullable=False)
    # epoch em milissegundos
    criado_em = Column(BigInteger, nullable=False)
    ip = Column(String(64), nullable=True)


class Academia(Base):
    __tablename__ = "academias"

    id = Column(BigInteger, primary_key=True, autoincrement=False)
    nome = Column(String(255), nullable=False)
    cnpj = Column(String(32), nullable=True)
    tipo = Column(String(64), nullable=True)
    preco = Column(Numeric(10, 2), nullable=True)
    endereco = Column(String(255), nullable=True)
    cidade = Column(String(120), nullable=True)
    estado = Column(String(2), nullable=True)
    telefone = Column(String(40), nullable=True)
    email = Column(String(255), nullable=True)
    descricao = Column(Text, nullable=True)
    facilidades = Column(JSON, nullable=True)
    abertura = Column(String(5), nullable=True)
    fechamento = Column(String(5), nullable=True)
    foto = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default="ativo", index=True)
    proprietario_id = Column(BigInteger, nullable=True)
    criado_em = Column(DateTime(timezone=True), nullable=True)
    data_atualizacao = Column(DateTime(timezone=True), nullable=True)


class Proprietario(Base):
    __tablename__ = "proprietarios"

    id = Column(BigInteger, primary_key=True, autoincrement=False)
    nome = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    telefone = Column(String(40), nullable=True)
    cpf = Column(String(20), nullable=True)
    endereco = Column(String(255), nullable=True)
    cidade = Column(String(120), nullable=True)
    estado = Column(String(2), nullable=True)
    descricao = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="ativo")
    criado_em = Column(DateTime(timezone=True), nullable=True)
    data_atualizacao = Column(DateTime(timezone=True), nullable=True)


class Personal(Base):
    __tablename__ = "personais"

    id = Column(BigInteger, primary_key=True, autoincrement=False)
    nome = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    telefone = Column(String(40), nullable=True)
    cidade = Column(String(120), nullable=True)
    bairros = Column(JSON, nullable=True)
    especialidade = Column(String(120), nullable=True)
    anos_experiencia = Column(Integer, nullable=True, default=0)
    cref = Column(String(40), nullable=True)
    sobre = Column(Text, nullable=True)
    descricao = Column(Text, nullable=True)
    expectativas = Column(Text, nullable=True)
    academia_id = Column(BigInteger, nullable=True)
    status = Column(String(20), nullable=False, default="pendente", index=True)
    tipo = Column(String(40), nullable=True)
    avaliacao = Column(Float, nullable=True, default=0)
    total_avaliacoes = Column(Integer, nullable=True, default=0)
    experiencia = Column(String(40), nullable=True)
    foto = Column(String(500), nullable=True)
    criado_em = Column(DateTime(timezone=True), nullable=True)
    data_atualizacao = Column(DateTime(timezone=True), nullable=True)
    data_aprovacao = Column(DateTime(timezone=True), nullable=True)


class Administrador(Base):
    __tablename__ = "administradores"

    id = Column(BigInteger, primary_key=True, autoincrement=False)
    nome = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(128), nullable=True)
    password_salt = Column(String(64), nullable=True)
    nivel = Column(String(20), nullable=False, default="admin")
    status = Column(String(20), nullable=False, default="ativo")
    telefone = Column(String(40), nullable=True)
    observacoes = Column(Text, nullable=True)
    criado_por = Column(String(255), nullable=True)
    ultimo_acesso = Column(DateTime(timezone=True), nullable=True)
    criado_em = Column(DateTime(timezone=True), nullable=True)
    data_atualizacao = Column(DateTime(timezone=True), nullable=True)


# tipo de entidade -> (modelo, coluna chave)
ENTITIES = {
    "usuarios": (Usuario, "email"),
    "sessoes": (Sessao, "token"),
    "academias": (Academia, "id"),
    "proprietarios": (Proprietario, "id"),
    "personais": (Personal, "id"),
    "administradores": (Administrador, "id"),
}

KEYED_TYPES = {"usuarios", "sessoes"}
