from app.constants.activity_codes import ActivityCode


ACTIVITY_TEMPLATES = {
    # ---------------- AUTH ----------------
    ActivityCode.LOGIN:
        "{actor_role} ({actor_email}) logged in",

    ActivityCode.LOGOUT:
        "{actor_role} ({actor_email}) logged out",

    # ---------------- USERS ----------------
    ActivityCode.CREATE_USER:
        "{actor_role} ({actor_email}) created user {target_email} with role {target_role}",

    ActivityCode.UPDATE_USER_ROLE:
        "{actor_role} ({actor_email}) changed role of {target_email} from {old_role} to {new_role}",

    ActivityCode.UPDATE_USER_EMAIL:
        "{actor_role} ({actor_email}) changed email of {target_email} to {new_email}",

    ActivityCode.UPDATE_USER_NAME:
        "{actor_role} ({actor_email}) renamed user {target_email} to {new_name}",

    ActivityCode.UPDATE_USER_PASSWORD:
        "{actor_role} ({actor_email}) changed password for user {target_email}",

    ActivityCode.RESET_USER_PASSWORD:
        "{actor_role} ({actor_email}) reset password for user {target_email}",

    ActivityCode.DEACTIVATE_USER:
        "{actor_role} ({actor_email}) deactivated user {target_email}",

    ActivityCode.REACTIVATE_USER:
        "{actor_role} ({actor_email}) reactivated user {target_email}",

    ActivityCode.UPDATE_PROFILE:
        "{actor_role} ({actor_email}) updated own profile: {changes}",

    # ---------------- QUOTATIONS ----------------
    ActivityCode.CREATE_QUOTATION:
        "{actor_role} ({actor_email}) created quotation {target_name} for {client}",

    ActivityCode.UPDATE_QUOTATION:
        "{actor_role} ({actor_email}) updated quotation {target_name}: {changes}",

    ActivityCode.UPDATE_QUOTATION_STATUS:
        "{actor_role} ({actor_email}) moved quotation {target_name} from {old_status} to {new_status}",

    ActivityCode.DELETE_QUOTATION:
        "{actor_role} ({actor_email}) deleted quotation {target_name}",

    # ---------------- SALES TASKS ----------------
    ActivityCode.CREATE_SALES_TASK:
        "{actor_role} ({actor_email}) created sales task for {client} at stage {stage}",

    ActivityCode.UPDATE_SALES_TASK_STATUS:
        "{actor_role} ({actor_email}) marked stage {stage} as {state} on sales task #{task_id}",

    ActivityCode.REBUILD_SALES_TASK_PROGRESS:
        "{actor_role} ({actor_email}) rebuilt progress of sales task #{task_id} from {log_count} log entries",

    ActivityCode.DELETE_SALES_TASK:
        "{actor_role} ({actor_email}) deleted sales task #{task_id} ({client})",

    # ---------------- MASTER DATA ----------------
    ActivityCode.CREATE_MASTER_OPTION:
        "{actor_role} ({actor_email}) created {category} option {target_name}",

    ActivityCode.UPDATE_MASTER_OPTION:
        "{actor_role} ({actor_email}) updated {category} option {target_name}: {changes}",

    ActivityCode.DEACTIVATE_MASTER_OPTION:
        "{actor_role} ({actor_email}) deactivated {category} option {target_name}",

    # ---------------- SETTINGS ----------------
    ActivityCode.UPDATE_COMPANY_SETTINGS:
        "{actor_role} ({actor_email}) updated company settings ({locales})",
}
