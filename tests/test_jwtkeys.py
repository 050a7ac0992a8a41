import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from pnpkit.jwtkeys import JWTConfig, SignParams, SigningKeyError, new_sign_params


@pytest.fixture(scope="module")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def _pem(key, fmt):
    return key.private_bytes(
        serialization.Encoding.PEM, fmt, serialization.NoEncryption()
    ).decode("ascii")


def test_hmac_key_is_secret_bytes():
    params = new_sign_params(JWTConfig(signing_method="HS256", signing_key="secret"))
    assert params == SignParams(method="HS256", signing_key=b"secret")


@pytest.mark.parametrize("method", ["RS256", "RS512", "PS384"])
def test_rsa_pkcs1_key_is_loaded(rsa_key, method):
    rsa_pem = _pem(rsa_key, serialization.PrivateFormat.TraditionalOpenSSL)
    params = new_sign_params(JWTConfig(signing_method=method, signing_key=rsa_pem))
    assert params.method == method
    assert isinstance(params.signing_key, rsa.RSAPrivateKey)
    assert params.signing_key.private_numbers() == rsa_key.private_numbers()


def test_rsa_pkcs8_key_is_rejected(rsa_key):
    rsa_pem = _pem(rsa_key, serialization.PrivateFormat.PKCS8)
    with pytest.raises(SigningKeyError, match="error loading RSA private key"):
        new_sign_params(JWTConfig(signing_method="RS256", signing_key=rsa_pem))


def test_rsa_without_pem_block_is_rejected():
    with pytest.raises(SigningKeyError, match="failed to parse PEM block"):
        new_sign_params(JWTConfig(signing_method="RS256", signing_key="secret"))


def test_ecdsa_sec1_key_is_loaded():
    ec_key = ec.generate_private_key(ec.SECP256R1())
    ec_pem = _pem(ec_key, serialization.PrivateFormat.TraditionalOpenSSL)
    params = new_sign_params(JWTConfig(signing_method="ES256", signing_key=ec_pem))
    assert isinstance(params.signing_key, ec.EllipticCurvePrivateKey)
    assert params.signing_key.private_numbers() == ec_key.private_numbers()


def test_ecdsa_rejects_rsa_key(rsa_key):
    rsa_pem = _pem(rsa_key, serialization.PrivateFormat.TraditionalOpenSSL)
    with pytest.raises(SigningKeyError, match="error loading ECDSA private key"):
        new_sign_params(JWTConfig(signing_method="ES384", signing_key=rsa_pem))


def test_eddsa_key_is_raw_block_bytes():
    ed_key = ed25519.Ed25519PrivateKey.generate()
    ed_pem = _pem(ed_key, serialization.PrivateFormat.PKCS8)
    expected = ed_key.private_bytes(
        serialization.Encoding.DER,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    params = new_sign_params(JWTConfig(signing_method="EdDSA", signing_key=ed_pem))
    assert params.signing_key == expected


def test_eddsa_without_pem_block_is_rejected():
    with pytest.raises(SigningKeyError, match="error loading EdDSA private key"):
        new_sign_params(JWTConfig(signing_method="EdDSA", signing_key="secret"))


@pytest.mark.parametrize("method", ["none", "HS1024", ""])
def test_unsupported_method(method):
    with pytest.raises(SigningKeyError, match="unsupported signing method"):
        new_sign_params(JWTConfig(signing_method=method, signing_key="secret"))


def test_from_env_default_prefix():
    config = JWTConfig.from_env(
        {"JWT_SIGNING_METHOD": "HS512", "JWT_SIGNING_KEY": "secret"}
    )
    assert config == JWTConfig(signing_method="HS512", signing_key="secret")


def test_from_env_custom_prefix():
    config = JWTConfig.from_env(
        {"AUTH_SIGNING_METHOD": "HS384", "AUTH_SIGNING_KEY": "secret"}, prefix="AUTH_"
    )
    assert config.signing_method == "HS384"
    assert config.signing_key == "secret"


@pytest.mark.parametrize(
    "environ",
    [
        {"JWT_SIGNING_KEY": "secret"},
        {"JWT_SIGNING_METHOD": "HS256"},
        {"JWT_SIGNING_METHOD": "HS256", "JWT_SIGNING_KEY": ""},
    ],
)
def test_from_env_requires_values(environ):
    with pytest.raises(ValueError, match="JWT_SIGNING_"):
        JWTConfig.from_env(environ)