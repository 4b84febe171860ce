"""
Merchant Keyword Table

Ordered list of keyword groups for common merchants in Spain and LatAm.

IMPORTANT: Order is priority. The classifier returns the FIRST entry with a
matching keyword, so more specific entries must come before generic ones.
Several keywords overlap on purpose or by accident ('REPSOL' fuel vs
'REPSOL LUZ' electricity, 'MOVISTAR' telecom vs 'MOVISTAR PLUS'
subscriptions); the list order decides those cases and must not be
re-sorted.

Keywords are upper case. Some carry a trailing space ('BAR ', 'BP ') to
avoid matching inside longer words.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MerchantMapping(BaseModel):
    """One keyword group and the category it assigns."""
    model_config = ConfigDict(frozen=True)

    keywords: tuple[str, ...] = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    sub_category: Optional[str] = None

    @field_validator('keywords')
    @classmethod
    def normalize_keywords(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Upper-case once here so matching only upper-cases the description."""
        keywords = tuple(k.upper() for k in v if k)
        if not keywords:
            raise ValueError("A merchant mapping needs at least one non-empty keyword")
        return keywords


def _mapping(keywords: list[str], category: str, sub_category: Optional[str] = None) -> MerchantMapping:
    return MerchantMapping(keywords=tuple(keywords), category=category, sub_category=sub_category)


MERCHANT_MAPPINGS: tuple[MerchantMapping, ...] = (
    # ALIMENTACIÓN
    _mapping(
        ['MERCADONA', 'CARREFOUR', 'LIDL', 'ALDI', 'DIA ', 'DIA%', 'AHORRAMAS', 'CONSUM',
         'EROSKI', 'SUPERCOR', 'HIPERCOR', 'ALCAMPO', 'CAPRABO', 'MAKRO', 'BONPREU', 'CONDIS',
         'FROIZ', 'GADIS', 'COVIRAN', 'MASYMAS', 'LUPA', 'BM SUPERMERCADOS', 'ALIMERKA',
         'PRYCA', 'CONTINENTE', 'SPAR'],
        'Alimentación', 'Supermercados',
    ),
    _mapping(
        ['PANADERIA', 'FRUTERIA', 'CARNICERIA', 'PESCADERIA', 'CHARCUTERIA', 'PASTELERIA',
         'VERDULERIA'],
        'Alimentación', 'Comercio Local',
    ),

    # RESTAURACIÓN Y DELIVERY
    _mapping(
        ['RESTAURANTE', 'BAR ', 'CAFETERIA', 'MC DONALD', 'MCDONALDS', 'BURGER KING', 'KFC',
         'STARBUCKS', 'GLOVO', 'JUST EAT', 'UBER EATS', 'DELIVEROO', 'TELEPIZZA', 'DOMINOS',
         '100 MONTADITOS', 'LIZARRAN', 'FOSTER', 'VIPS', 'GINOS', 'TAGLIATELLA', 'GOIKO',
         'FIVE GUYS', 'POPEYES', 'SUBWAY', 'TGB', 'THE GOOD BURGER', 'TACO BELL', 'RODILLA',
         'SMASH', 'PAPA JOHNS', 'CASA TARRADELLAS'],
        'Comida y Bebida', 'Restaurantes',
    ),

    # TRANSPORTE
    _mapping(
        ['REPSOL', 'CEPSA', 'BP ', 'SHELL', 'GASOLINERA', 'ESTACION SERV', 'GALP', 'PETROL',
         'BALLENOIL', 'PLENOIL', 'PETRONOR', 'AVIA', 'CAMPSA', 'MEROIL'],
        'Transporte', 'Gasolina',
    ),
    _mapping(
        ['RENFE', 'METRO', 'ALSA', 'AVANZA', 'EMT', 'TMB', 'CERCANIAS', 'TRANVIA', 'AUTOBUS',
         'BONOTREN', 'ABONO TRANSPORTE', 'CABIFY', 'UBER', 'FREENOW', 'TAXI', 'BOLT'],
        'Transporte', 'Transporte Público',
    ),
    _mapping(
        ['RYANAIR', 'IBERIA', 'VUELING', 'AIR EUROPA', 'EASYJET', 'LUFTHANSA', 'BINTER',
         'VOLOTEA'],
        'Transporte', 'Vuelos',
    ),
    _mapping(
        ['PARQUIMETRO', 'PARKING', 'APARCAMIENTO', 'TELPARK', 'ELPARKING', 'EYSA',
         'ZONA AZUL', 'ORA', 'PEAJE', 'AUTPISTA', 'BIP&DRIVE', 'VIA T'],
        'Transporte', 'Parking y Peajes',
    ),

    # HOGAR Y SUMINISTROS
    _mapping(
        ['IKEA', 'LEROY MERLIN', 'BAUHAUS', 'CONFORAMA', 'ZARA HOME', 'H&M HOME', 'TIGER',
         'CASA', 'BRICOMART', 'OBRAMAT', 'BRICODEPOT'],
        'Vivienda', 'Mobiliario',
    ),
    _mapping(
        ['ENDESA', 'IBERDROLA', 'NATURGY', 'REPSOL LUZ', 'EDP', 'HOLALUZ', 'CURENERGIA',
         'SOM ENERGIA', 'LUCERA', 'ENERGIA'],
        'Vivienda', 'Electricidad',
    ),
    _mapping(
        ['CANAL ISABEL', 'AGUAS', 'AQUALIA', 'AGBAR'],
        'Vivienda', 'Agua',
    ),
    _mapping(
        ['TELEFONICA', 'MOVISTAR', 'ORANGE', 'VODAFONE', 'YOIGO', 'PEPEPHONE', 'SIMYO', 'LOWI',
         'O2', 'DIGI', 'JAZZTEL', 'MASMOVIL', 'AMENA'],
        'Vivienda', 'Internet y Teléfono',
    ),

    # SALUD Y BELLEZA
    _mapping(
        ['FARMACIA', 'OPTICA', 'DENTAL', 'FISIO', 'HOSPITAL', 'CLINICA', 'SANITAS', 'ADESLAS',
         'MAPFRE SALUD', 'ASISA', 'DKV', 'CENTRO MEDICO', 'PSIQUIATRA', 'PSICOLOGO',
         'PODOLOGO', 'DERMATOLOGO', 'VISION'],
        'Salud', 'Médico',
    ),
    _mapping(
        ['PELUQUERIA', 'BARBERIA', 'ESTETICA', 'DEPILACION', 'DRUNI', 'PRIMOR', 'SEPHORA',
         'DOUGLAS', 'KIKO MILANO', 'MERCADONA PERFUMERIA', 'MAC COSMETICS'],
        'Salud', 'Belleza',
    ),

    # OCIO Y SUSCRIPCIONES
    _mapping(
        ['NETFLIX', 'SPOTIFY', 'DISNEY PLUS', 'DISNEY+', 'AMAZON PRIME', 'PRIME VIDEO', 'HBO',
         'MAX', 'APPLE.COM/BILL', 'GOOGLE *', 'PLAYSTATION', 'NINTENDO', 'STEAM',
         'EPIC GAMES', 'XBOX', 'TWITCH', 'YOUTUBE PREMIUM', 'DAZN', 'FILMIN', 'MOVISTAR PLUS',
         'ATRESPLAYER', 'MITELE'],
        'Ocio', 'Suscripciones',
    ),
    _mapping(
        ['CINE', 'YELMO', 'CINESA', 'KINEPOLIS', 'TEATRO', 'CONCIERTO', 'TICKETMASTER',
         'ENTRADAS.COM', 'MUSEO', 'EXPOSICION', 'ESTADIO', 'FUTBOL'],
        'Ocio', 'Entretenimiento',
    ),
    _mapping(
        ['GIMNASIO', 'GYM', 'BASIC FIT', 'MCFIT', 'ALTAFIT', 'VIVAGYM', 'GO FIT', 'BIDI',
         'CROSSFIT', 'PISCINA', 'POLIDEPORTIVO'],
        'Ocio', 'Deporte',
    ),

    # COMPRAS
    _mapping(
        ['EL CORTE INGLES', 'AMAZON', 'ALIEXPRESS', 'TEMU', 'SHEIN', 'MIRAVIA'],
        'Compras', 'General',
    ),
    _mapping(
        ['ZARA', 'H&M', 'MANGO', 'ULL & BEAR', 'STRADIVARIUS', 'BERSHKA', 'MASSIMO DUTTI',
         'OYSHO', 'SPRINGFIELD', 'PRIMARK', 'DECATHLON', 'NIKE', 'ADIDAS', 'ZALANDO', 'ASOS',
         'CORTEFIEL', 'PEDRO DEL HIERRO', 'BIMBA Y LOLA', 'WOMEN SECRET', 'SCALPERS'],
        'Compras', 'Ropa y Calzado',
    ),
    _mapping(
        ['MEDIA MARKT', 'WORTEN', 'PC COMPONENTES', 'APPLE STORE', 'K-TUIN', 'FNAC', 'GAME'],
        'Compras', 'Electrónica',
    ),

    # EDUCACIÓN
    _mapping(
        ['COLEGIO', 'UNIVERSIDAD', 'CURSO', 'ACADEMIA', 'UDEMY', 'COURSERA', 'PLATZI',
         'DOMESTIKA', 'EDX', 'ESCUELA', 'GUARDERIA', 'INSTITUTO', 'MATRICULA', 'MASTER',
         'LIBRERIA', 'PAPELERIA', 'CASA DEL LIBRO'],
        'Educación',
    ),

    # SEGUROS Y GASTOS FINANCIEROS
    # Insurance is filed under 'Educación' in the host's category tree.
    # TODO: move to a 'Seguros' category once the host's category tree has one.
    _mapping(
        ['MAPFRE', 'MUTUA', 'LINEA DIRECTA', 'ALLIANZ', 'AXA', 'ZURICH', 'PELAYO', 'GENESIS',
         'VERTI', 'QUALITAS', 'SEGURO'],
        'Educación', 'Seguros',
    ),
    _mapping(
        ['COMISION', 'MANTENIMIENTO', 'INTERESES', 'CUOTA TARJETA', 'RECARGO', 'DESCUBIERTO'],
        'Impuestos y Tasas', 'Comisiones Bancarias',
    ),
    _mapping(
        ['AEAT', 'AGENCIA TRIBUTARIA', 'SEGURIDAD SOCIAL', 'IBI', 'AYUNTAMIENTO', 'IMPUESTO',
         'TASA', 'MULTA', 'DGT'],
        'Impuestos y Tasas', 'Impuestos',
    ),

    # TRANSFERENCIAS Y CAJEROS
    _mapping(
        ['BIZUM', 'TRANSFERENCIA A', 'TRASPASO', 'ENVIO', 'PAYPAL'],
        'Transferencias', 'Enviadas',
    ),
    _mapping(
        ['CAJERO', 'RETIRADA EFECTIVO', 'DISPOSICION EFECTIVO', 'ATM'],
        'Transferencias', 'Efectivo',
    ),
)
