# gymp2/schemas.py
from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

GymStatus = Literal["ativo", "inativo", "pendente"]
PersonalStatus = Literal["pendente", "ativo", "inativo"]
AdminLevel = Literal["admin", "super_admin"]


def _not_null(value):
    # obrigatório ou enum: PUT pode omitir, mas não anular
    if value is None:
        raise ValueError("campo não pode ser nulo")
    return value


# -----------------------
# Autenticação
# (campos opcionais: a validação com mensagem própria fica nas rotas)
# -----------------------
class SignupIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class TokenIn(BaseModel):
    token: Optional[str] = None


# -----------------------
# Academias
# -----------------------
class AcademiaBase(BaseModel):
    cnpj: Optional[str] = None
    preco: Optional[float] = Field(default=None, ge=0)
    cidade: Optional[str] = None
    estado: Optional[str] = Field(default=None, max_length=2)
    telefone: Optional[str] = None
    email: Optional[str] = None
    descricao: Optional[str] = None
    facilidades: Optional[Union[List[str], str]] = None
    abertura: Optional[str] = None
    fechamento: Optional[str] = None
    foto: Optional[str] = None
    status: Optional[GymStatus] = None
    proprietario_id: Optional[int] = None


class AcademiaCreate(AcademiaBase):
    nome: str = Field(..., min_length=1, max_length=255)
    endereco: str = Field(..., min_length=1, max_length=255)
    tipo: str = Field(..., min_length=1, max_length=64)


class AcademiaUpdate(AcademiaBase):
    nome: Optional[str] = Field(default=None, min_length=1, max_length=255)
    endereco: Optional[str] = None
    tipo: Optional[str] = None

    @field_validator("nome", "endereco", "tipo", "status")
    @classmethod
    def _sem_nulos(cls, value):
        return _not_null(value)


class StatusUpdate(BaseModel):
    status: GymStatus


# -----------------------
# Proprietários
# -----------------------
class ProprietarioBase(BaseModel):
    email: Optional[str] = None
    telefone: Optional[str] = None
    cpf: Optional[str] = None
    endereco: Optional[str] = None
    cidade: Optional[str] = None
    estado: Optional[str] = Field(default=None, max_length=2)
    descricao: Optional[str] = None
    status: Optional[Literal["ativo", "inativo"]] = None


class ProprietarioCreate(ProprietarioBase):
    nome: str = Field(..., min_length=1, max_length=255)


class ProprietarioUpdate(ProprietarioBase):
    nome: Optional[str] = Field(default=None, min_length=1, max_length=255)

    @field_validator("nome", "status")
    @classmethod
    def _sem_nulos(cls, value):
        return _not_null(value)


# -----------------------
# Personais
# -----------------------
class PersonalBase(BaseModel):
    email: Optional[str] = None
    telefone: Optional[str] = None
    cidade: Optional[str] = None
    bairros: Optional[Union[List[str], str]] = None
    especialidade: Optional[str] = None
    anos_experiencia: Optional[int] = Field(default=None, ge=0)
    cref: Optional[str] = None
    sobre: Optional[str] = None
    descricao: Optional[str] = None
    expectativas: Optional[str] = None
    academia_id: Optional[int] = None
    status: Optional[PersonalStatus] = None
    tipo: Optional[str] = None
    avaliacao: Optional[float] = Field(default=None, ge=0, le=5)
    total_avaliacoes: Optional[int] = Field(default=None, ge=0)
    foto: Optional[str] = None


class PersonalCreate(PersonalBase):
    nome: str = Field(..., min_length=1, max_length=255)


class PersonalUpdate(PersonalBase):
    nome: Optional[str] = Field(default=None, min_length=1, max_length=255)

    @field_validator("nome", "status")
    @classmethod
    def _sem_nulos(cls, value):
        return _not_null(value)


class PersonalSignup(BaseModel):
    """Formulário público de cadastro de personal."""

    nome: str = Field(..., min_length=1)
    telefone: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    cidade: str = Field(..., min_length=1)
    bairros: str = Field(..., min_length=1)
    especialidade: str = Field(..., min_length=1)
    anos_experiencia: int = Field(..., ge=0)
    cref: Optional[str] = None
    sobre: Optional[str] = None
    expectativas: Optional[str] = None


# -----------------------
# Administradores
# -----------------------
class AdminCreate(BaseModel):
    nome: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    senha: str = Field(..., min_length=1)
    nivel: AdminLevel
    status: Optional[Literal["ativo", "inativo"]] = None
    telefone: Optional[str] = None
    observacoes: Optional[str] = None


class AdminUpdate(BaseModel):
    nome: Optional[str] = None
    email: Optional[str] = None
    senha: Optional[str] = None
    nivel: Optional[AdminLevel] = None
    status: Optional[Literal["ativo", "inativo"]] = None
    telefone: Optional[str] = None
    observacoes: Optional[str] = None


# -----------------------
# Sistema
# -----------------------
class HealthOut(BaseModel):
    status: str = Field(default="online")
    database: str
    remote_enabled: bool
    timestamp: str
    version: str
