# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

# presence of this file makes pytest add repository-root to sys.path, so tests may import
# top-level modules (e.g. `version`, `draft_release`) w/o prior installation
