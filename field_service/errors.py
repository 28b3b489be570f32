# ==============================================================================
# ERRORES DEL DOMINIO
# ==============================================================================
# Toda operación del ciclo de vida falla lanzando una subclase de
# OperationError. El estado NO se modifica cuando se lanza una de ellas.
# Los mensajes están en portugués porque se muestran tal cual al usuario.
# ==============================================================================


class OperationError(Exception):
    """Base de los errores de validación de operaciones."""

    default_message = 'Operação inválida.'

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)

    @property
    def code(self) -> str:
        return self.__class__.__name__

    @property
    def message(self) -> str:
        return str(self)


class InvalidCredentials(OperationError):
    default_message = 'E-mail ou senha incorretos.'


class EmailAlreadyUsed(OperationError):
    default_message = 'Este e-mail já está sendo utilizado.'


class InvalidAmount(OperationError):
    default_message = 'Insira um valor numérico válido.'


class InvalidTransition(OperationError):
    """Acción no permitida desde el estado actual de la OS."""

    default_message = 'Transição de status inválida.'

    def __init__(self, status=None, action=None, message: str = None):
        self.status = status
        self.action = action
        if message is None and status is not None and action is not None:
            status_value = getattr(status, 'value', status)
            action_value = getattr(action, 'value', action)
            message = f'Não é possível executar "{action_value}" em uma OS com status {status_value}.'
        super().__init__(message)


class MissingSelection(OperationError):
    default_message = 'Nenhum registro selecionado.'


class ProtectedUser(OperationError):
    """Cuenta que no puede eliminarse (admin sembrado o la propia sesión)."""

    default_message = 'Este usuário não pode ser removido.'


class PermissionDenied(OperationError):
    default_message = 'Permissão negada.'


class NotSignedIn(OperationError):
    default_message = 'Você precisa entrar no sistema.'


class StorageError(Exception):
    """
    Fallo de escritura/lectura del snapshot persistido.

    No es un OperationError: no es una validación del usuario sino un error
    de E/S que debe mostrarse y nunca silenciarse.
    """
    pass
