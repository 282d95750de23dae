"""
User-facing message catalog.

Handlers look messages up by key so the envelope text follows the configured
locale. Unknown locales fall back to Brazilian Portuguese, the app's home
market.
"""

from __future__ import annotations

from mamacita.config import get_settings

DEFAULT_LOCALE = "pt-BR"

CATALOG: dict[str, dict[str, str]] = {
    "pt-BR": {
        "missing_fields": "Campos obrigatórios ausentes: {fields}",
        "invalid_email": "Email inválido",
        "invalid_password": "A senha deve ter pelo menos 6 caracteres",
        "invalid_role": "Role inválido. Use MOTHER ou COLLABORATOR",
        "profession_required": "Profissão é obrigatória para colaboradores",
        "email_taken": "Este email já está cadastrado",
        "user_created": "Usuário criado com sucesso",
        "bad_credentials": "Email ou senha incorretos",
        "login_ok": "Login realizado com sucesso",
        "token_missing": "Token de autenticação não fornecido",
        "token_invalid": "Token inválido ou expirado",
        "user_not_found": "Usuário não encontrado",
        "forbidden": "Você não tem permissão para acessar este recurso",
        "profile_updated": "Perfil atualizado com sucesso",
        "password_fields_required": "Senha atual e nova senha são obrigatórias",
        "new_password_too_short": "A nova senha deve ter pelo menos 6 caracteres",
        "wrong_current_password": "Senha atual incorreta",
        "password_changed": "Senha alterada com sucesso",
        "onboarding_done": "Onboarding concluído com sucesso",
        "due_date_past": "A data prevista deve ser no futuro",
        "invalid_fields": "Campos inválidos: {fields}",
        "pregnancy_active_exists": "Você já tem uma gravidez ativa",
        "pregnancy_created": "Gravidez criada com sucesso",
        "pregnancy_not_found": "Gravidez não encontrada",
        "no_active_pregnancy": "Nenhuma gravidez ativa encontrada",
        "pregnancy_not_owner": "Você não tem permissão para atualizar esta gravidez",
        "pregnancy_updated": "Gravidez atualizada com sucesso",
        "invalid_pregnancy_status": "Status inválido. Use ACTIVE, COMPLETED ou LOST",
        "symptoms_logged": "Sintomas registrados com sucesso",
        "invalid_week": "Semana inválida. Use um número entre 1 e 40",
        "weekly_content_not_found": "Conteúdo para a semana {week} não encontrado",
        "group_not_found": "Grupo não encontrado",
        "group_private": "Este grupo é privado",
        "group_created": "Grupo criado com sucesso",
        "group_deleted": "Grupo removido com sucesso",
        "group_not_owner": "Você não tem permissão para remover este grupo",
        "already_member": "Você já é membro deste grupo",
        "joined_group": "Você entrou no grupo com sucesso",
        "not_member": "Você não é membro deste grupo",
        "left_group": "Você saiu do grupo",
        "post_not_found": "Post não encontrado",
        "post_created": "Post criado com sucesso",
        "post_deleted": "Post deletado com sucesso",
        "post_not_owner": "Você não tem permissão para deletar este post",
        "comment_added": "Comentário adicionado",
        "comment_not_found": "Comentário não encontrado",
        "comment_not_owner": "Você não tem permissão para deletar este comentário",
        "comment_deleted": "Comentário removido",
        "invalid_reaction": "Tipo de reação inválido",
        "reaction_added": "Reação adicionada",
        "reaction_changed": "Reação atualizada",
        "reaction_removed": "Reação removida",
        "post_reported": "Denúncia enviada com sucesso",
        "class_not_found": "Aula não encontrada",
        "class_created": "Aula criada com sucesso",
        "already_enrolled": "Você já está matriculada nesta aula",
        "enrolled": "Matrícula realizada com sucesso",
        "video_not_owner": "Você não tem permissão para adicionar vídeos a esta aula",
        "video_added": "Vídeo adicionado com sucesso",
        "video_not_found": "Vídeo não encontrado",
        "progress_required": "Progresso é obrigatório",
        "progress_updated": "Progresso atualizado",
        "invalid_rating": "Avaliação deve ser entre 1 e 5 estrelas",
        "review_requires_enrollment": "Você precisa estar matriculada para avaliar esta aula",
        "review_added": "Avaliação adicionada com sucesso",
        "event_not_found": "Evento não encontrado",
        "event_created": "Evento criado com sucesso",
        "event_start_past": "A data de início deve ser no futuro",
        "event_end_before_start": "A data de término deve ser após a data de início",
        "event_location_required": "Localização é obrigatória para eventos presenciais",
        "event_link_required": "Link da reunião é obrigatório para eventos online",
        "invalid_event_type": "Tipo de evento inválido. Use IN_PERSON, ONLINE ou HYBRID",
        "invalid_capacity": "A capacidade deve ser um número positivo",
        "already_registered": "Você já está registrada neste evento",
        "event_full": "Este evento está lotado",
        "registered": "Inscrição realizada com sucesso",
        "waitlisted": "Você foi adicionada à lista de espera",
        "not_registered": "Você não está registrada neste evento",
        "registration_cancelled": "Inscrição cancelada com sucesso",
        "image_required": "Imagem é obrigatória",
        "image_uploaded": "Imagem enviada com sucesso",
        "image_too_large": "A imagem excede o tamanho máximo de {limit_mb} MB",
        "invalid_folder": "Pasta inválida",
        "media_not_found": "Mídia não encontrada",
        "media_not_owner": "Você não tem permissão para deletar esta mídia",
        "media_deleted": "Mídia deletada com sucesso",
        "notification_not_found": "Notificação não encontrada",
        "notification_read": "Notificação marcada como lida",
        "notifications_read": "Todas as notificações foram marcadas como lidas",
        "invalid_report_status": "Status inválido",
        "report_not_found": "Denúncia não encontrada",
        "report_updated": "Denúncia atualizada com sucesso",
        "collaborator_not_found": "Colaborador não encontrado",
        "collaborator_verified": "Colaborador verificado com sucesso",
        "class_published": "Aula publicada com sucesso",
        "event_published": "Evento publicado com sucesso",
        "rate_limited": "Muitas requisições deste IP, por favor tente novamente em alguns minutos.",
        "route_not_found": "Rota não encontrada",
        "internal_error": "Ocorreu um erro interno no servidor",
        "notify_comment_title": "Novo comentário",
        "notify_comment_body": "{name} comentou no seu post",
        "notify_reaction_title": "Nova reação",
        "notify_reaction_body": "{name} reagiu ao seu post",
        "notify_verified_title": "Perfil verificado",
        "notify_verified_body": "Seu perfil de colaboradora foi verificado",
        "notify_published_title": "Conteúdo publicado",
        "notify_published_body": "\"{title}\" foi publicado",
        "welcome_subject": "Bem-vinda ao Mamacita",
        "welcome_body": "Olá, {name}! Sua conta foi criada com sucesso.",
        "invalid_image": "Apenas arquivos de imagem são permitidos",
        "api_running": "Mamacita API está no ar! 🌸",
    },
    "en": {
        "missing_fields": "Missing required fields: {fields}",
        "invalid_email": "Invalid email",
        "invalid_password": "Password must be at least 6 characters long",
        "invalid_role": "Invalid role. Use MOTHER or COLLABORATOR",
        "profession_required": "Profession is required for collaborators",
        "email_taken": "This email is already registered",
        "user_created": "User created successfully",
        "bad_credentials": "Incorrect email or password",
        "login_ok": "Logged in successfully",
        "token_missing": "Authentication token not provided",
        "token_invalid": "Invalid or expired token",
        "user_not_found": "User not found",
        "forbidden": "You are not allowed to access this resource",
        "profile_updated": "Profile updated successfully",
        "password_fields_required": "Current and new password are required",
        "new_password_too_short": "New password must be at least 6 characters long",
        "wrong_current_password": "Current password is incorrect",
        "password_changed": "Password changed successfully",
        "onboarding_done": "Onboarding completed successfully",
        "due_date_past": "Due date must be in the future",
        "invalid_fields": "Invalid fields: {fields}",
        "pregnancy_active_exists": "You already have an active pregnancy",
        "pregnancy_created": "Pregnancy created successfully",
        "pregnancy_not_found": "Pregnancy not found",
        "no_active_pregnancy": "No active pregnancy found",
        "pregnancy_not_owner": "You are not allowed to update this pregnancy",
        "pregnancy_updated": "Pregnancy updated successfully",
        "invalid_pregnancy_status": "Invalid status. Use ACTIVE, COMPLETED or LOST",
        "symptoms_logged": "Symptoms logged successfully",
        "invalid_week": "Invalid week. Use a number between 1 and 40",
        "weekly_content_not_found": "Content for week {week} not found",
        "group_not_found": "Group not found",
        "group_private": "This group is private",
        "group_created": "Group created successfully",
        "group_deleted": "Group removed successfully",
        "group_not_owner": "You are not allowed to remove this group",
        "already_member": "You are already a member of this group",
        "joined_group": "You joined the group",
        "not_member": "You are not a member of this group",
        "left_group": "You left the group",
        "post_not_found": "Post not found",
        "post_created": "Post created successfully",
        "post_deleted": "Post deleted successfully",
        "post_not_owner": "You are not allowed to delete this post",
        "comment_added": "Comment added",
        "comment_not_found": "Comment not found",
        "comment_not_owner": "You are not allowed to delete this comment",
        "comment_deleted": "Comment removed",
        "invalid_reaction": "Invalid reaction type",
        "reaction_added": "Reaction added",
        "reaction_changed": "Reaction updated",
        "reaction_removed": "Reaction removed",
        "post_reported": "Report submitted",
        "class_not_found": "Class not found",
        "class_created": "Class created successfully",
        "already_enrolled": "You are already enrolled in this class",
        "enrolled": "Enrolled successfully",
        "video_not_owner": "You are not allowed to add videos to this class",
        "video_added": "Video added successfully",
        "video_not_found": "Video not found",
        "progress_required": "Progress is required",
        "progress_updated": "Progress updated",
        "invalid_rating": "Rating must be between 1 and 5 stars",
        "review_requires_enrollment": "You must be enrolled to review this class",
        "review_added": "Review added successfully",
        "event_not_found": "Event not found",
        "event_created": "Event created successfully",
        "event_start_past": "Start date must be in the future",
        "event_end_before_start": "End date must be after the start date",
        "event_location_required": "Location is required for in-person events",
        "event_link_required": "Meeting link is required for online events",
        "invalid_event_type": "Invalid event type. Use IN_PERSON, ONLINE or HYBRID",
        "invalid_capacity": "Capacity must be a positive number",
        "already_registered": "You are already registered for this event",
        "event_full": "This event is full",
        "registered": "Registered successfully",
        "waitlisted": "You were added to the waitlist",
        "not_registered": "You are not registered for this event",
        "registration_cancelled": "Registration cancelled",
        "image_required": "Image is required",
        "image_uploaded": "Image uploaded successfully",
        "image_too_large": "Image exceeds the {limit_mb} MB size limit",
        "invalid_folder": "Invalid folder",
        "media_not_found": "Media not found",
        "media_not_owner": "You are not allowed to delete this media",
        "media_deleted": "Media deleted successfully",
        "notification_not_found": "Notification not found",
        "notification_read": "Notification marked as read",
        "notifications_read": "All notifications marked as read",
        "invalid_report_status": "Invalid status",
        "report_not_found": "Report not found",
        "report_updated": "Report updated successfully",
        "collaborator_not_found": "Collaborator not found",
        "collaborator_verified": "Collaborator verified successfully",
        "class_published": "Class published successfully",
        "event_published": "Event published successfully",
        "rate_limited": "Too many requests from this IP, please try again in a few minutes.",
        "route_not_found": "Route not found",
        "internal_error": "An internal server error occurred",
        "notify_comment_title": "New comment",
        "notify_comment_body": "{name} commented on your post",
        "notify_reaction_title": "New reaction",
        "notify_reaction_body": "{name} reacted to your post",
        "notify_verified_title": "Profile verified",
        "notify_verified_body": "Your collaborator profile has been verified",
        "notify_published_title": "Content published",
        "notify_published_body": "\"{title}\" has been published",
        "welcome_subject": "Welcome to Mamacita",
        "welcome_body": "Hi {name}! Your account has been created.",
        "invalid_image": "Only image files are allowed",
        "api_running": "Mamacita API is running! 🌸",
    },
}


def msg(key: str, locale: str | None = None, **kwargs) -> str:
    """Return the catalog message for ``key`` formatted with ``kwargs``."""
    locale = locale or get_settings().locale
    table = CATALOG.get(locale) or CATALOG[DEFAULT_LOCALE]
    template = table.get(key) or CATALOG[DEFAULT_LOCALE][key]
    return template.format(**kwargs) if kwargs else template
