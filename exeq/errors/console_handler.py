"""
    ConsoleErrorHandler (générique, configurable)
"""
from exeq.errors.base import ErrorHandler
from exeq.errors.exceptions import (ApplicationError,
                                    AuthorizationError,
                                    CommandDecodeError,
                                    CommandParseError,
                                    ConfigurationError,
                                    ExecutionError,
                                    RedirectSetupError)


class ConsoleErrorHandler(ErrorHandler):
    """Handler pour afficher les erreurs dans la console.

    Distingue les erreurs connues (ApplicationError) des erreurs
    inattendues, et affiche un message de solution adapté au type
    d'erreur.
    """

    def __init__(
        self,
        base_error_type: type[Exception] = ApplicationError,
        solutions: dict[type[Exception], str] | None = None
    ) -> None:
        """Initialise le handler console.

        Args:
            base_error_type: Classe de base pour distinguer erreurs
                connues/inconnues (défaut: ApplicationError).
            solutions: Dictionnaire {TypeException: "message solution"}
                prioritaire sur les solutions par défaut.
        """
        self.base_error_type = base_error_type
        self.solutions = solutions or {}

    def handle(self, error: Exception) -> None:
        """Affiche l'erreur dans la console avec des messages utilisateur.

        Args:
            error: L'exception à afficher.
        """
        if isinstance(error, self.base_error_type):
            self._handle_known_error(error)
        else:
            self._handle_unknown_error(error)

    def _solution_for(self, error: Exception) -> str:
        """Retourne la suggestion adaptée au type d'erreur."""
        for error_type, solution in self.solutions.items():
            if isinstance(error, error_type):
                return solution
        if isinstance(error, CommandParseError):
            return ("Séparez les redirections de la commande par un "
                    "espace ; les pipes et >> ne sont pas supportés.")
        if isinstance(error, CommandDecodeError):
            return "Vérifiez le format de la tâche publiée."
        if isinstance(error, AuthorizationError):
            return ("Ajoutez l'exécutable à la liste blanche ou lancez "
                    "le serveur en mode privilégié.")
        if isinstance(error, RedirectSetupError):
            return "Vérifiez le chemin et les permissions du fichier."
        if isinstance(error, ConfigurationError):
            return "Vérifiez votre fichier de configuration."
        if isinstance(error, ExecutionError):
            return "Consultez les logs pour plus de détails."
        return "Voir les suggestions ci-dessus."

    def _handle_known_error(self, error: Exception) -> None:
        """Gère les erreurs connues du projet.

        Args:
            error: L'exception métier à traiter.
        """
        print(f"\n🛑 {type(error).__name__}: {str(error)}")
        print(f"\n🔧 Solution : {self._solution_for(error)}")

    def _handle_unknown_error(self, error: Exception) -> None:
        """Gère les erreurs inattendues.

        Args:
            error: L'exception non prévue à afficher.
        """
        print(f"\n💥 Erreur inattendue: {str(error)}")
        print(f"Type: {type(error).__name__}")
        print(
            "\n📋 Cela peut être un bug. Veuillez ouvrir une issue avec ces informations."
        )
